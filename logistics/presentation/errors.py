from fastapi import HTTPException, status

from logistics.domain.exceptions import (
    DomainException, ValidationError, UnauthorizedError, ForbiddenError, NotFoundError,
    ConflictError, InvalidTransitionError, GeocodingError, GeocodingUnavailableError
)

# first match wins, subclasses before their bases
_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidTransitionError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (GeocodingUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (GeocodingError, status.HTTP_400_BAD_REQUEST),
)


def to_http_exception(exc: DomainException) -> HTTPException:
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
            return HTTPException(status_code=code, detail=str(exc), headers=headers)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
