"""Shared guards for the order use cases: loading, ownership, reference checks."""
import logging

from logistics.domain.models import Order, Principal, is_valid_id
from logistics.domain.exceptions import (
    ForbiddenError, OrderNotFoundError, TruckNotFoundError, LocationNotFoundError, ValidationError
)

logger = logging.getLogger(__name__)


async def load_order(uow, order_id: str) -> Order:
    # a malformed id can never match, so it reads as not found
    if not is_valid_id(order_id):
        raise OrderNotFoundError("Order not found")
    order = await uow.orders.get_by_id(order_id)
    if not order:
        raise OrderNotFoundError("Order not found")
    return order


def ensure_ownership_or_admin(order: Order, principal: Principal) -> None:
    if order.is_owned_by(principal) or principal.is_admin:
        return
    logger.warning(f"User {principal.id} denied access to order {order.id}")
    raise ForbiddenError("You do not have permission for this order")


async def ensure_truck_exists(uow, truck_id: str) -> None:
    if not is_valid_id(truck_id):
        raise ValidationError("Invalid Truck id")
    if not await uow.trucks.exists(truck_id):
        raise TruckNotFoundError("Truck not found")


async def ensure_location_exists(uow, location_id: str, label: str) -> None:
    if not is_valid_id(location_id):
        raise ValidationError(f"Invalid {label} id")
    if not await uow.locations.exists(location_id):
        raise LocationNotFoundError(f"{label} not found")
