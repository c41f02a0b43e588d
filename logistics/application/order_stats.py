from typing import List

from logistics.domain.models import OrderStat, Principal


class OrderStatsUseCase:
    """Order count per status: every order for admins, own orders otherwise"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, principal: Principal) -> List[OrderStat]:
        owner = None if principal.is_admin else principal.id
        async with self._uow() as uow:
            return await uow.orders.count_by_status(owner)
