from typing import List
from fastapi import APIRouter, Depends, status

from logistics.domain.models import Principal
from logistics.domain.exceptions import DomainException
from logistics.presentation.schemas import (
    TruckCreateRequest, TruckUpdateRequest, TruckResponse, DeletedResponse, ErrorResponse
)
from logistics.presentation.dependencies import get_uow, get_principal
from logistics.presentation.errors import to_http_exception
from logistics.application.trucks import (
    CreateTruckUseCase, CreateTruckDTO, ListTrucksUseCase, GetTruckUseCase,
    UpdateTruckUseCase, UpdateTruckDTO, DeleteTruckUseCase
)

router = APIRouter(prefix="/trucks", tags=["trucks"])

_errors = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# Use case factories
def get_create_truck_use_case(uow=Depends(get_uow)):
    return CreateTruckUseCase(uow)


def get_list_trucks_use_case(uow=Depends(get_uow)):
    return ListTrucksUseCase(uow)


def get_get_truck_use_case(uow=Depends(get_uow)):
    return GetTruckUseCase(uow)


def get_update_truck_use_case(uow=Depends(get_uow)):
    return UpdateTruckUseCase(uow)


def get_delete_truck_use_case(uow=Depends(get_uow)):
    return DeleteTruckUseCase(uow)


@router.post("", response_model=TruckResponse, responses=_errors, status_code=status.HTTP_201_CREATED)
async def create_truck(
    request: TruckCreateRequest,
    principal: Principal = Depends(get_principal),
    use_case: CreateTruckUseCase = Depends(get_create_truck_use_case)
):
    try:
        dto = CreateTruckDTO(year=request.year, color=request.color, plates=request.plates, user=request.user)
        return TruckResponse.from_domain(await use_case(dto, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.get("", response_model=List[TruckResponse])
async def list_trucks(
    principal: Principal = Depends(get_principal),
    use_case: ListTrucksUseCase = Depends(get_list_trucks_use_case)
):
    """Own trucks; every truck for admins"""
    trucks = await use_case(principal)
    return [TruckResponse.from_domain(t) for t in trucks]


@router.get("/{truck_id}", response_model=TruckResponse, responses=_errors)
async def get_truck(
    truck_id: str,
    principal: Principal = Depends(get_principal),
    use_case: GetTruckUseCase = Depends(get_get_truck_use_case)
):
    try:
        return TruckResponse.from_domain(await use_case(truck_id, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.patch("/{truck_id}", response_model=TruckResponse, responses=_errors)
async def update_truck(
    truck_id: str,
    request: TruckUpdateRequest,
    principal: Principal = Depends(get_principal),
    use_case: UpdateTruckUseCase = Depends(get_update_truck_use_case)
):
    try:
        dto = UpdateTruckDTO(**request.model_dump(exclude_unset=True))
        return TruckResponse.from_domain(await use_case(truck_id, dto, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.delete("/{truck_id}", response_model=DeletedResponse, responses=_errors)
async def delete_truck(
    truck_id: str,
    principal: Principal = Depends(get_principal),
    use_case: DeleteTruckUseCase = Depends(get_delete_truck_use_case)
):
    try:
        return await use_case(truck_id, principal)
    except DomainException as e:
        raise to_http_exception(e)
