from fastapi import APIRouter, Depends, Query, status

from logistics.domain.models import Principal
from logistics.domain.exceptions import DomainException
from logistics.presentation.schemas import (
    LocationCreateRequest, LocationUpdateRequest, LocationResponse, PageResponse,
    DeletedResponse, ErrorResponse
)
from logistics.presentation.dependencies import get_uow, get_principal, get_places_service
from logistics.presentation.errors import to_http_exception
from logistics.application.locations import (
    CreateLocationUseCase, CreateLocationDTO, ListLocationsUseCase, ListLocationsDTO,
    UpdateLocationUseCase, UpdateLocationDTO, DeleteLocationUseCase
)

router = APIRouter(prefix="/locations", tags=["locations"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# Use case factories
def get_create_location_use_case(uow=Depends(get_uow), places=Depends(get_places_service)):
    return CreateLocationUseCase(uow, places)


def get_list_locations_use_case(uow=Depends(get_uow)):
    return ListLocationsUseCase(uow)


def get_update_location_use_case(uow=Depends(get_uow), places=Depends(get_places_service)):
    return UpdateLocationUseCase(uow, places)


def get_delete_location_use_case(uow=Depends(get_uow)):
    return DeleteLocationUseCase(uow)


@router.post("", response_model=LocationResponse, responses=_errors, status_code=status.HTTP_201_CREATED)
async def create_location(
    request: LocationCreateRequest,
    principal: Principal = Depends(get_principal),
    use_case: CreateLocationUseCase = Depends(get_create_location_use_case)
):
    """Geocode a place_id and store it for the current user"""
    try:
        location = await use_case(CreateLocationDTO(place_id=request.place_id), principal)
        return LocationResponse.from_domain(location)
    except DomainException as e:
        raise to_http_exception(e)


@router.get("", response_model=PageResponse[LocationResponse])
async def list_locations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, gt=0),
    principal: Principal = Depends(get_principal),
    use_case: ListLocationsUseCase = Depends(get_list_locations_use_case)
):
    result = await use_case(ListLocationsDTO(page=page, limit=limit), principal)
    return PageResponse[LocationResponse].from_page(
        result, [LocationResponse.from_domain(loc) for loc in result.items]
    )


@router.patch("/{location_id}", response_model=LocationResponse, responses=_errors)
async def update_location(
    location_id: str,
    request: LocationUpdateRequest,
    principal: Principal = Depends(get_principal),
    use_case: UpdateLocationUseCase = Depends(get_update_location_use_case)
):
    try:
        dto = UpdateLocationDTO(place_id=request.place_id, address=request.address)
        return LocationResponse.from_domain(await use_case(location_id, dto, principal))
    except DomainException as e:
        raise to_http_exception(e)


@router.delete("/{location_id}", response_model=DeletedResponse, responses=_errors)
async def delete_location(
    location_id: str,
    principal: Principal = Depends(get_principal),
    use_case: DeleteLocationUseCase = Depends(get_delete_location_use_case)
):
    try:
        return await use_case(location_id, principal)
    except DomainException as e:
        raise to_http_exception(e)
