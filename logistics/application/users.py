import logging
from typing import Optional
from pydantic import BaseModel, Field

from logistics.domain.models import User, UserRole, Page, Principal, is_valid_id
from logistics.domain.exceptions import ConflictError, ForbiddenError, UserNotFoundError
from logistics.application.interfaces import PasswordHasher
from logistics.application.auth import normalize_email

logger = logging.getLogger(__name__)


class ListUsersDTO(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, gt=0)
    search: Optional[str] = None


class UpdateUserDTO(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


def ensure_admin(principal: Principal) -> None:
    if not principal.is_admin:
        logger.warning(f"User {principal.id} denied access to user management")
        raise ForbiddenError("Admin role required")


async def _load_user(uow, user_id: str) -> User:
    if not is_valid_id(user_id):
        raise UserNotFoundError("User not found")
    user = await uow.users.get_by_id(user_id)
    if not user:
        raise UserNotFoundError("User not found")
    return user


class ListUsersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, query: ListUsersDTO, principal: Principal) -> Page[User]:
        ensure_admin(principal)
        async with self._uow() as uow:
            users, total = await uow.users.list((query.page - 1) * query.limit, query.limit, query.search)
        return Page[User](
            page=query.page,
            limit=query.limit,
            total=total,
            pages=Page.count_pages(total, query.limit),
            items=users
        )


class GetUserUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, principal: Principal) -> User:
        ensure_admin(principal)
        async with self._uow() as uow:
            return await _load_user(uow, user_id)


class UpdateUserUseCase:
    def __init__(self, unit_of_work, hasher: PasswordHasher):
        self._uow = unit_of_work
        self._hasher = hasher

    async def __call__(self, user_id: str, changes: UpdateUserDTO, principal: Principal) -> User:
        ensure_admin(principal)
        async with self._uow() as uow:
            user = await _load_user(uow, user_id)

            values = {}
            if changes.name is not None:
                values["name"] = changes.name.strip()
            if changes.email is not None:
                email = normalize_email(changes.email)
                other = await uow.users.get_by_email(email)
                if other and other.id != user.id:
                    raise ConflictError("Email already in use")
                values["email"] = email
            if changes.password is not None:
                values["password_hash"] = self._hasher.hash(changes.password)
            if changes.role is not None:
                values["role"] = changes.role

            if not values:
                return user

            await uow.users.update(user.id, values)
            await uow.commit()
            updated = await uow.users.get_by_id(user.id)

        logger.info(f"User {user.id} updated by {principal.id}")
        return updated


class DeleteUserUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, principal: Principal) -> dict:
        ensure_admin(principal)
        async with self._uow() as uow:
            user = await _load_user(uow, user_id)
            await uow.users.delete(user.id)
            await uow.commit()

        logger.info(f"User {user.id} deleted by {principal.id}")
        return {"deleted": True}
