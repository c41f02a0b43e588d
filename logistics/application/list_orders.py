import logging
from typing import Optional
from pydantic import BaseModel, Field

from logistics.domain.models import OrderFilters, OrderStatus, Page, Principal, is_valid_id
from logistics.domain.exceptions import ValidationError
from logistics.application.expand import OrderView, expand_orders

logger = logging.getLogger(__name__)


class ListOrdersDTO(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, gt=0)
    status: Optional[OrderStatus] = None
    truck: Optional[str] = None
    user: Optional[str] = None
    expand: bool = False


class ListOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, query: ListOrdersDTO, principal: Principal) -> Page[OrderView]:
        if query.truck and not is_valid_id(query.truck):
            raise ValidationError("Invalid Truck id")
        if query.user and not is_valid_id(query.user):
            raise ValidationError("Invalid User id")

        filters = OrderFilters(
            status=query.status,
            truck_id=query.truck,
            user_id=self._owner_scope(query.user, principal)
        )
        offset = (query.page - 1) * query.limit

        async with self._uow() as uow:
            orders, total = await uow.orders.list(filters, offset, query.limit)
            items = await expand_orders(uow, orders, query.expand)

        return Page[OrderView](
            page=query.page,
            limit=query.limit,
            total=total,
            pages=Page.count_pages(total, query.limit),
            items=items
        )

    @staticmethod
    def _owner_scope(requested: Optional[str], principal: Principal) -> Optional[str]:
        """Admins may pick any owner (or none); everyone else sees only their own orders"""
        if principal.is_admin:
            return requested
        if requested and requested != principal.id:
            logger.warning(f"User {principal.id} asked for orders of {requested}, scoped to own orders")
        return principal.id
