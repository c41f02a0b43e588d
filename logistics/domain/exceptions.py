class DomainException(Exception):
    pass


class ValidationError(DomainException):
    pass


class UnauthorizedError(DomainException):
    pass


class ForbiddenError(DomainException):
    pass


class ConflictError(DomainException):
    pass


class NotFoundError(DomainException):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class TruckNotFoundError(NotFoundError):
    pass


class LocationNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class InvalidTransitionError(DomainException):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid status transition: {_value(current)} -> {_value(requested)}")


class GeocodingError(DomainException):
    pass


class GeocodingUnavailableError(GeocodingError):
    pass


def _value(status) -> str:
    return getattr(status, "value", status)
