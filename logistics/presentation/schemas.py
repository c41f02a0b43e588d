from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from logistics.domain.models import OrderStatus, UserRole, User, Truck, Location, Page
from logistics.application.expand import OrderView
from logistics.application.change_order_status import ChangeStatusDTO


class StrictRequest(BaseModel):
    """Unknown body fields are rejected"""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class SignupRequest(StrictRequest):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    name: Optional[str] = None


class LoginRequest(StrictRequest):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserUpdateRequest(StrictRequest):
    name: Optional[str] = Field(None, min_length=3)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    role: Optional[UserRole] = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User):
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at
        )


class TruckCreateRequest(StrictRequest):
    year: str = Field(min_length=2)
    color: str = Field(min_length=2)
    plates: str = Field(min_length=3)
    user: Optional[str] = None


class TruckUpdateRequest(StrictRequest):
    year: Optional[str] = Field(None, min_length=2)
    color: Optional[str] = Field(None, min_length=2)
    plates: Optional[str] = Field(None, min_length=3)


class TruckResponse(BaseModel):
    id: str
    user: str
    year: str
    color: str
    plates: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, truck: Truck):
        return cls(
            id=truck.id,
            user=truck.user_id,
            year=truck.year,
            color=truck.color,
            plates=truck.plates,
            created_at=truck.created_at,
            updated_at=truck.updated_at
        )


class LocationCreateRequest(StrictRequest):
    place_id: str = Field(min_length=3)


class LocationUpdateRequest(StrictRequest):
    place_id: Optional[str] = Field(None, min_length=3)
    address: Optional[str] = Field(None, min_length=3)


class LocationResponse(BaseModel):
    id: str
    user: str
    place_id: str
    address: str
    latitude: float
    longitude: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, location: Location):
        return cls(
            id=location.id,
            user=location.user_id,
            place_id=location.place_id,
            address=location.address,
            latitude=location.latitude,
            longitude=location.longitude,
            created_at=location.created_at,
            updated_at=location.updated_at
        )


class OrderCreateRequest(StrictRequest):
    truck: str
    pickup: str
    dropoff: str
    status: Optional[OrderStatus] = None


class OrderUpdateRequest(StrictRequest):
    truck: Optional[str] = None
    pickup: Optional[str] = None
    dropoff: Optional[str] = None


class OrderStatusRequest(ChangeStatusDTO):
    model_config = ConfigDict(extra="forbid")


class OrderStatResponse(BaseModel):
    status: OrderStatus
    total: int


class DeletedResponse(BaseModel):
    deleted: bool


class ErrorResponse(BaseModel):
    detail: str


T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    page: int
    limit: int
    total: int
    pages: int
    items: List[T]

    @classmethod
    def from_page(cls, page: Page, items: List[T]):
        return cls(page=page.page, limit=page.limit, total=page.total, pages=page.pages, items=items)


OrderResponse = OrderView
