import logging
import re
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel

from logistics.domain.models import User, UserRole, Principal, new_id
from logistics.domain.exceptions import ConflictError, UnauthorizedError, UserNotFoundError
from logistics.application.interfaces import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


class SignupDTO(BaseModel):
    email: str
    password: str
    name: Optional[str] = None


class LoginDTO(BaseModel):
    email: str
    password: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def derive_name_from_email(email: str) -> str:
    """john.doe@example.com -> John Doe"""
    local = email.split("@")[0]
    words = re.sub(r"[._-]+", " ", local).split()
    if not words:
        return "User"
    return " ".join(w[:1].upper() + w[1:] for w in words)


class SignupUseCase:
    def __init__(self, unit_of_work, hasher: PasswordHasher, tokens: TokenService):
        self._uow = unit_of_work
        self._hasher = hasher
        self._tokens = tokens

    async def __call__(self, data: SignupDTO) -> AccessToken:
        email = normalize_email(data.email)
        name = data.name.strip() if data.name and len(data.name.strip()) >= 3 else derive_name_from_email(email)

        async with self._uow() as uow:
            if await uow.users.get_by_email(email):
                raise ConflictError("Email already in use")

            now = datetime.now(timezone.utc)
            user = User(
                id=new_id(),
                name=name,
                email=email,
                password_hash=self._hasher.hash(data.password),
                role=UserRole.USER,
                created_at=now,
                updated_at=now
            )
            await uow.users.create(user)
            await uow.commit()

        logger.info(f"User signed up: {user.id}")
        return AccessToken(access_token=self._tokens.issue(user))


class LoginUseCase:
    def __init__(self, unit_of_work, hasher: PasswordHasher, tokens: TokenService):
        self._uow = unit_of_work
        self._hasher = hasher
        self._tokens = tokens

    async def __call__(self, data: LoginDTO) -> AccessToken:
        async with self._uow() as uow:
            user = await uow.users.get_by_email(normalize_email(data.email))

        if not user or not self._hasher.verify(data.password, user.password_hash):
            logger.warning(f"Failed login for {data.email}")
            raise UnauthorizedError("Invalid credentials")
        return AccessToken(access_token=self._tokens.issue(user))


class GetCurrentUserUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, principal: Principal) -> User:
        async with self._uow() as uow:
            user = await uow.users.get_by_id(principal.id)
        if not user:
            raise UserNotFoundError("User not found")
        return user
