import logging
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from logistics.domain.models import Location, Page, Principal, new_id, is_valid_id
from logistics.domain.exceptions import ConflictError, LocationNotFoundError
from logistics.application.interfaces import PlacesService

logger = logging.getLogger(__name__)

DUPLICATE_LOCATION = "Location already exists for this user"


class CreateLocationDTO(BaseModel):
    place_id: str = Field(min_length=3)


class UpdateLocationDTO(BaseModel):
    place_id: Optional[str] = Field(None, min_length=3)
    address: Optional[str] = Field(None, min_length=3)


class ListLocationsDTO(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, gt=0)


async def _load_own_location(uow, location_id: str, principal: Principal) -> Location:
    # other users' locations are invisible, not forbidden
    if not is_valid_id(location_id):
        raise LocationNotFoundError("Location not found")
    location = await uow.locations.get_by_id(location_id)
    if not location or location.user_id != principal.id:
        raise LocationNotFoundError("Location not found")
    return location


class CreateLocationUseCase:
    def __init__(self, unit_of_work, places: PlacesService):
        self._uow = unit_of_work
        self._places = places

    async def __call__(self, data: CreateLocationDTO, principal: Principal) -> Location:
        async with self._uow() as uow:
            if await uow.locations.get_by_place(principal.id, data.place_id):
                raise ConflictError(DUPLICATE_LOCATION)

        # no transaction is held while the geocoder answers
        resolved = await self._places.resolve(data.place_id)

        now = datetime.now(timezone.utc)
        location = Location(
            id=new_id(),
            user_id=principal.id,
            place_id=data.place_id,
            address=resolved.address,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            # a concurrent insert of the same place surfaces as ConflictError here
            await uow.locations.create(location)
            await uow.commit()

        logger.info(f"Location created: {location.id} for user {principal.id}")
        return location


class ListLocationsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, query: ListLocationsDTO, principal: Principal) -> Page[Location]:
        async with self._uow() as uow:
            items, total = await uow.locations.list_by_user(
                principal.id, (query.page - 1) * query.limit, query.limit
            )
        return Page[Location](
            page=query.page,
            limit=query.limit,
            total=total,
            pages=Page.count_pages(total, query.limit),
            items=items
        )


class UpdateLocationUseCase:
    def __init__(self, unit_of_work, places: PlacesService):
        self._uow = unit_of_work
        self._places = places

    async def __call__(self, location_id: str, changes: UpdateLocationDTO, principal: Principal) -> Location:
        async with self._uow() as uow:
            location = await _load_own_location(uow, location_id, principal)
            if changes.place_id:
                duplicate = await uow.locations.get_by_place(principal.id, changes.place_id)
                if duplicate and duplicate.id != location.id:
                    raise ConflictError(DUPLICATE_LOCATION)

        values = {}
        if changes.place_id:
            resolved = await self._places.resolve(changes.place_id)
            values.update(
                place_id=changes.place_id,
                address=resolved.address,
                latitude=resolved.latitude,
                longitude=resolved.longitude
            )
        elif changes.address:
            values["address"] = changes.address

        if not values:
            return location

        async with self._uow() as uow:
            # re-checked, the location may have gone while geocoding
            await _load_own_location(uow, location.id, principal)
            await uow.locations.update(location.id, values)
            await uow.commit()
            updated = await uow.locations.get_by_id(location.id)

        logger.info(f"Location {location.id} updated")
        return updated


class DeleteLocationUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, location_id: str, principal: Principal) -> dict:
        async with self._uow() as uow:
            if not is_valid_id(location_id) or not await uow.locations.delete(location_id, principal.id):
                raise LocationNotFoundError("Location not found")
            await uow.commit()

        logger.info(f"Location {location_id} deleted")
        return {"deleted": True}
