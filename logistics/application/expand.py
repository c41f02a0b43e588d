from datetime import datetime
from typing import List, Sequence, Union
from pydantic import BaseModel

from logistics.domain.models import Order, OrderStatus, User, UserRole, Truck, Location


class UserSummary(BaseModel):
    """Public part of a user record"""
    id: str
    name: str
    email: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class OrderView(BaseModel):
    """Order as returned to callers; references are ids unless expanded"""
    id: str
    user: Union[UserSummary, str]
    truck: Union[Truck, str]
    pickup: Union[Location, str]
    dropoff: Union[Location, str]
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderView":
        return cls(
            id=order.id,
            user=order.user_id,
            truck=order.truck_id,
            pickup=order.pickup_id,
            dropoff=order.dropoff_id,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at
        )


async def expand_orders(uow, orders: Sequence[Order], expand: bool) -> List[OrderView]:
    if not expand:
        return [OrderView.from_order(o) for o in orders]

    users = {u.id: UserSummary.from_user(u) for u in await uow.users.get_many([o.user_id for o in orders])}
    trucks = {t.id: t for t in await uow.trucks.get_many([o.truck_id for o in orders])}
    location_ids = [o.pickup_id for o in orders] + [o.dropoff_id for o in orders]
    locations = {loc.id: loc for loc in await uow.locations.get_many(location_ids)}

    # references whose record is gone stay as plain ids
    return [
        OrderView(
            id=o.id,
            user=users.get(o.user_id, o.user_id),
            truck=trucks.get(o.truck_id, o.truck_id),
            pickup=locations.get(o.pickup_id, o.pickup_id),
            dropoff=locations.get(o.dropoff_id, o.dropoff_id),
            status=o.status,
            created_at=o.created_at,
            updated_at=o.updated_at
        )
        for o in orders
    ]
