import uuid
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel


class OrderStatus(str, Enum):
    CREATED = "created"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"


# Exhaustive: anything not listed here is an invalid transition
ALLOWED_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.CREATED: (OrderStatus.IN_TRANSIT,),
    OrderStatus.IN_TRANSIT: (OrderStatus.COMPLETED,),
    OrderStatus.COMPLETED: (),
}


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value) -> bool:
    """Ids are UUID strings issued by new_id()"""
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class Principal(BaseModel):
    """Authenticated actor, derived from a verified token"""
    id: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class User(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    created_at: datetime
    updated_at: datetime


class Truck(BaseModel):
    id: str
    user_id: str
    year: str
    color: str
    plates: str
    created_at: datetime
    updated_at: datetime


class Location(BaseModel):
    id: str
    user_id: str
    place_id: str
    address: str
    latitude: float
    longitude: float
    created_at: datetime
    updated_at: datetime


class ResolvedPlace(BaseModel):
    """Value Object: result of a places lookup"""
    address: str
    latitude: float
    longitude: float


class Order(BaseModel):
    """Domain Entity: a shipment tying an owner, a truck and two locations"""
    id: str
    user_id: str
    truck_id: str
    pickup_id: str
    dropoff_id: str
    status: OrderStatus = OrderStatus.CREATED
    created_at: datetime
    updated_at: datetime

    def allowed_next(self) -> tuple[OrderStatus, ...]:
        return ALLOWED_TRANSITIONS[self.status]

    def can_transition_to(self, status: OrderStatus) -> bool:
        return status in self.allowed_next()

    def is_owned_by(self, principal: Principal) -> bool:
        return self.user_id == principal.id


class OrderFilters(BaseModel):
    status: Optional[OrderStatus] = None
    truck_id: Optional[str] = None
    user_id: Optional[str] = None


class OrderStat(BaseModel):
    status: OrderStatus
    total: int


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    page: int
    limit: int
    total: int
    pages: int
    items: List[T]

    @staticmethod
    def count_pages(total: int, limit: int) -> int:
        # at least one page so pagers stay well-defined on empty results
        return max(1, -(-total // limit))
