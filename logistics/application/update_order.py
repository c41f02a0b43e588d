import logging
from typing import Optional
from pydantic import BaseModel, ConfigDict

from logistics.domain.models import Order, Principal
from logistics.application.order_access import (
    load_order, ensure_ownership_or_admin, ensure_truck_exists, ensure_location_exists
)

logger = logging.getLogger(__name__)


class UpdateOrderDTO(BaseModel):
    # status changes go through ChangeOrderStatusUseCase only
    model_config = ConfigDict(extra="forbid")

    truck: Optional[str] = None
    pickup: Optional[str] = None
    dropoff: Optional[str] = None


class UpdateOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, changes: UpdateOrderDTO, principal: Principal) -> Order:
        async with self._uow() as uow:
            order = await load_order(uow, order_id)
            ensure_ownership_or_admin(order, principal)

            values = {}
            if changes.truck is not None:
                await ensure_truck_exists(uow, changes.truck)
                values["truck_id"] = changes.truck
            if changes.pickup is not None:
                await ensure_location_exists(uow, changes.pickup, "Pickup location")
                values["pickup_id"] = changes.pickup
            if changes.dropoff is not None:
                await ensure_location_exists(uow, changes.dropoff, "Dropoff location")
                values["dropoff_id"] = changes.dropoff

            if not values:
                return order

            await uow.orders.update_refs(order.id, values)
            await uow.commit()
            updated = await uow.orders.get_by_id(order.id)

        logger.info(f"Order {order.id} updated: {', '.join(values)}")
        return updated
