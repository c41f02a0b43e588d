from typing import Optional
from fastapi import APIRouter, Depends, Query

from logistics.domain.models import Principal
from logistics.domain.exceptions import DomainException
from logistics.presentation.schemas import (
    UserUpdateRequest, UserResponse, PageResponse, DeletedResponse, ErrorResponse
)
from logistics.presentation.dependencies import get_uow, get_principal, get_password_hasher
from logistics.presentation.errors import to_http_exception
from logistics.application.users import (
    ListUsersUseCase, ListUsersDTO, GetUserUseCase, UpdateUserUseCase, UpdateUserDTO, DeleteUserUseCase
)

router = APIRouter(prefix="/users", tags=["users"])

_errors = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# Use case factories
def get_list_users_use_case(uow=Depends(get_uow)):
    return ListUsersUseCase(uow)


def get_get_user_use_case(uow=Depends(get_uow)):
    return GetUserUseCase(uow)


def get_update_user_use_case(uow=Depends(get_uow), hasher=Depends(get_password_hasher)):
    return UpdateUserUseCase(uow, hasher)


def get_delete_user_use_case(uow=Depends(get_uow)):
    return DeleteUserUseCase(uow)


@router.get("", response_model=PageResponse[UserResponse], responses=_errors)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, gt=0),
    search: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case)
):
    """Admin only"""
    try:
        result = await use_case(ListUsersDTO(page=page, limit=limit, search=search), principal)
        return PageResponse[UserResponse].from_page(result, [UserResponse.from_domain(u) for u in result.items])
    except DomainException as e:
        raise to_http_exception(e)


@router.get("/{user_id}", response_model=UserResponse, responses=_errors)
async def get_user(
    user_id: str,
    principal: Principal = Depends(get_principal),
    use_case: GetUserUseCase = Depends(get_get_user_use_case)
):
    try:
        return UserResponse.from_domain(await use_case(user_id, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.patch("/{user_id}", response_model=UserResponse, responses=_errors)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    principal: Principal = Depends(get_principal),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case)
):
    try:
        dto = UpdateUserDTO(**request.model_dump(exclude_unset=True))
        return UserResponse.from_domain(await use_case(user_id, dto, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.delete("/{user_id}", response_model=DeletedResponse, responses=_errors)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(get_principal),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case)
):
    try:
        return await use_case(user_id, principal)
    except DomainException as e:
        raise to_http_exception(e)
