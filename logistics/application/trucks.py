import logging
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel

from logistics.domain.models import Truck, Principal, new_id, is_valid_id
from logistics.domain.exceptions import ForbiddenError, TruckNotFoundError, UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class CreateTruckDTO(BaseModel):
    year: str
    color: str
    plates: str
    user: Optional[str] = None


class UpdateTruckDTO(BaseModel):
    year: Optional[str] = None
    color: Optional[str] = None
    plates: Optional[str] = None


def normalize_plates(plates: str) -> str:
    return plates.strip().upper()


async def _load_owned_truck(uow, truck_id: str, principal: Principal) -> Truck:
    if not is_valid_id(truck_id):
        raise TruckNotFoundError("Truck not found")
    truck = await uow.trucks.get_by_id(truck_id)
    if not truck:
        raise TruckNotFoundError("Truck not found")
    if truck.user_id != principal.id and not principal.is_admin:
        logger.warning(f"User {principal.id} denied access to truck {truck.id}")
        raise ForbiddenError("You do not have permission for this truck")
    return truck


class CreateTruckUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, data: CreateTruckDTO, principal: Principal) -> Truck:
        owner = principal.id
        if data.user and data.user != principal.id:
            if not principal.is_admin:
                raise ForbiddenError("Only admins can register trucks for other users")
            if not is_valid_id(data.user):
                raise ValidationError("Invalid User id")
            owner = data.user

        async with self._uow() as uow:
            if owner != principal.id and not await uow.users.get_by_id(owner):
                raise UserNotFoundError("User not found")

            now = datetime.now(timezone.utc)
            truck = Truck(
                id=new_id(),
                user_id=owner,
                year=data.year.strip(),
                color=data.color.strip(),
                plates=normalize_plates(data.plates),
                created_at=now,
                updated_at=now
            )
            # duplicate plates surface as ConflictError from the repository
            await uow.trucks.create(truck)
            await uow.commit()

        logger.info(f"Truck created: {truck.id} ({truck.plates})")
        return truck


class ListTrucksUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, principal: Principal) -> List[Truck]:
        async with self._uow() as uow:
            return await uow.trucks.list(None if principal.is_admin else principal.id)


class GetTruckUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, truck_id: str, principal: Principal) -> Truck:
        async with self._uow() as uow:
            return await _load_owned_truck(uow, truck_id, principal)


class UpdateTruckUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, truck_id: str, changes: UpdateTruckDTO, principal: Principal) -> Truck:
        async with self._uow() as uow:
            truck = await _load_owned_truck(uow, truck_id, principal)

            values = {}
            if changes.year is not None:
                values["year"] = changes.year.strip()
            if changes.color is not None:
                values["color"] = changes.color.strip()
            if changes.plates is not None:
                values["plates"] = normalize_plates(changes.plates)
            if not values:
                return truck

            await uow.trucks.update(truck.id, values)
            await uow.commit()
            updated = await uow.trucks.get_by_id(truck.id)

        logger.info(f"Truck {truck.id} updated")
        return updated


class DeleteTruckUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, truck_id: str, principal: Principal) -> dict:
        async with self._uow() as uow:
            truck = await _load_owned_truck(uow, truck_id, principal)
            await uow.trucks.delete(truck.id)
            await uow.commit()

        logger.info(f"Truck {truck.id} deleted")
        return {"deleted": True}
