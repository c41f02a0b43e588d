from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from logistics.config import settings
from logistics.database import get_session_factory
from logistics.domain.models import Principal
from logistics.domain.exceptions import UnauthorizedError
from logistics.infrastructure.unit_of_work import UnitOfWork
from logistics.infrastructure.http_clients import HTTPPlacesClient
from logistics.infrastructure.security import BcryptPasswordHasher, JWTTokenService
from logistics.presentation.errors import to_http_exception

bearer_scheme = HTTPBearer(auto_error=False)


def get_uow(session_factory=Depends(get_session_factory)) -> UnitOfWork:
    return UnitOfWork(session_factory)


def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(settings.BCRYPT_ROUNDS)


def get_token_service() -> JWTTokenService:
    return JWTTokenService(settings.JWT_SECRET, settings.JWT_ALGORITHM, settings.JWT_EXPIRES_MINUTES)


def get_places_service() -> HTTPPlacesClient:
    return HTTPPlacesClient(settings.PLACES_BASE_URL, settings.GOOGLE_PLACES_API_KEY)


def get_principal(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    tokens: JWTTokenService = Depends(get_token_service)
) -> Principal:
    """Verified bearer token -> Principal; the only place token claims are read"""
    try:
        if credentials is None:
            raise UnauthorizedError("Not authenticated")
        return tokens.verify(credentials.credentials)
    except UnauthorizedError as e:
        raise to_http_exception(e)
