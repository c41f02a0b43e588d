import logging

from logistics.domain.models import Principal
from logistics.domain.exceptions import OrderNotFoundError
from logistics.application.order_access import load_order, ensure_ownership_or_admin

logger = logging.getLogger(__name__)


class DeleteOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, principal: Principal) -> dict:
        async with self._uow() as uow:
            order = await load_order(uow, order_id)
            ensure_ownership_or_admin(order, principal)
            if not await uow.orders.delete(order.id):
                raise OrderNotFoundError("Order not found")
            await uow.commit()

        logger.info(f"Order {order.id} deleted by {principal.id}")
        return {"deleted": True}
