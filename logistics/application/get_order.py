from typing import Optional

from logistics.domain.models import Principal
from logistics.application.expand import OrderView, expand_orders
from logistics.application.order_access import load_order, ensure_ownership_or_admin


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, expand: bool = False, principal: Optional[Principal] = None) -> OrderView:
        async with self._uow() as uow:
            order = await load_order(uow, order_id)
            # internal lookups pass no principal and skip the ownership check
            if principal is not None:
                ensure_ownership_or_admin(order, principal)
            views = await expand_orders(uow, [order], expand)
            return views[0]
