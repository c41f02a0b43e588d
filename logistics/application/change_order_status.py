import logging
from pydantic import BaseModel, field_validator

from logistics.domain.models import Order, OrderStatus, Principal
from logistics.domain.exceptions import ConflictError, InvalidTransitionError, OrderNotFoundError
from logistics.application.order_access import load_order, ensure_ownership_or_admin

logger = logging.getLogger(__name__)


class ChangeStatusDTO(BaseModel):
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize(cls, value):
        # "In Transit", "in-transit" -> "in_transit"
        if isinstance(value, str):
            return "_".join(value.strip().lower().replace("-", " ").split())
        return value


class ChangeOrderStatusUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, status: OrderStatus, principal: Principal) -> Order:
        async with self._uow() as uow:
            order = await load_order(uow, order_id)
            ensure_ownership_or_admin(order, principal)

            if not order.can_transition_to(status):
                raise InvalidTransitionError(order.status, status)

            # compare-and-swap against the status we validated
            swapped = await uow.orders.update_status_if(order.id, order.status, status)
            if not swapped:
                fresh = await uow.orders.get_by_id(order.id)
                if fresh is None:
                    raise OrderNotFoundError("Order not found")
                if not fresh.can_transition_to(status):
                    raise InvalidTransitionError(fresh.status, status)
                raise ConflictError("Order was modified concurrently, retry the request")

            await uow.commit()
            updated = await uow.orders.get_by_id(order.id)

        logger.info(f"Order {order.id} status {order.status.value} -> {status.value}")
        return updated
