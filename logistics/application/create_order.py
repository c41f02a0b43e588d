import logging
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel

from logistics.domain.models import Order, OrderStatus, Principal, new_id
from logistics.application.order_access import ensure_truck_exists, ensure_location_exists


logger = logging.getLogger(__name__)


class CreateOrderDTO(BaseModel):
    truck: str
    pickup: str
    dropoff: str
    status: Optional[OrderStatus] = None


class CreateOrderUseCase:
    def __init__(self, unit_of_work, allow_initial_status: bool = False):
        self._uow = unit_of_work
        self._allow_initial_status = allow_initial_status

    async def __call__(self, order_data: CreateOrderDTO, principal: Principal) -> Order:
        logger.info(f"Creating order for user {principal.id}, truck {order_data.truck}")
        status = self._initial_status(order_data.status, principal)

        async with self._uow() as uow:
            # each reference is checked on its own so callers can tell which one is bad
            await ensure_truck_exists(uow, order_data.truck)
            await ensure_location_exists(uow, order_data.pickup, "Pickup location")
            await ensure_location_exists(uow, order_data.dropoff, "Dropoff location")

            now = datetime.now(timezone.utc)
            order = Order(
                id=new_id(),
                user_id=principal.id,
                truck_id=order_data.truck,
                pickup_id=order_data.pickup,
                dropoff_id=order_data.dropoff,
                status=status,
                created_at=now,
                updated_at=now
            )
            await uow.orders.create(order)
            await uow.commit()

        logger.info(f"Order created: {order.id} ({order.status.value})")
        return order

    def _initial_status(self, requested: Optional[OrderStatus], principal: Principal) -> OrderStatus:
        if requested is None or requested == OrderStatus.CREATED:
            return OrderStatus.CREATED
        if self._allow_initial_status:
            return requested
        logger.warning(
            f"Ignoring initial status {requested.value} supplied by user {principal.id}, "
            f"orders start as {OrderStatus.CREATED.value}"
        )
        return OrderStatus.CREATED
