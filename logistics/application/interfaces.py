from abc import ABC, abstractmethod
from typing import Optional, List, Sequence, Tuple
from logistics.domain.models import (
    Order, OrderFilters, OrderStat, OrderStatus, User, Truck, Location, ResolvedPlace, Principal
)


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def list(self, filters: OrderFilters, offset: int, limit: int) -> Tuple[List[Order], int]:
        pass

    @abstractmethod
    async def update_refs(self, order_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def update_status_if(self, order_id: str, expected: OrderStatus, status: OrderStatus) -> bool:
        """Compare-and-swap on status; False when no row matched"""
        pass

    @abstractmethod
    async def delete(self, order_id: str) -> bool:
        pass

    @abstractmethod
    async def count_by_status(self, user_id: Optional[str] = None) -> List[OrderStat]:
        pass


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_many(self, ids: Sequence[str]) -> List[User]:
        pass

    @abstractmethod
    async def create(self, user: User) -> None:
        pass

    @abstractmethod
    async def list(self, offset: int, limit: int, search: Optional[str] = None) -> Tuple[List[User], int]:
        pass

    @abstractmethod
    async def update(self, user_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        pass


class TruckRepository(ABC):
    @abstractmethod
    async def get_by_id(self, truck_id: str) -> Optional[Truck]:
        pass

    @abstractmethod
    async def exists(self, truck_id: str) -> bool:
        pass

    @abstractmethod
    async def get_many(self, ids: Sequence[str]) -> List[Truck]:
        pass

    @abstractmethod
    async def create(self, truck: Truck) -> None:
        pass

    @abstractmethod
    async def list(self, user_id: Optional[str] = None) -> List[Truck]:
        pass

    @abstractmethod
    async def update(self, truck_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def delete(self, truck_id: str) -> bool:
        pass


class LocationRepository(ABC):
    @abstractmethod
    async def get_by_id(self, location_id: str) -> Optional[Location]:
        pass

    @abstractmethod
    async def exists(self, location_id: str) -> bool:
        pass

    @abstractmethod
    async def get_many(self, ids: Sequence[str]) -> List[Location]:
        pass

    @abstractmethod
    async def get_by_place(self, user_id: str, place_id: str) -> Optional[Location]:
        pass

    @abstractmethod
    async def create(self, location: Location) -> None:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, offset: int, limit: int) -> Tuple[List[Location], int]:
        pass

    @abstractmethod
    async def update(self, location_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def delete(self, location_id: str, user_id: str) -> bool:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def users(self) -> UserRepository:
        pass

    @property
    @abstractmethod
    def trucks(self) -> TruckRepository:
        pass

    @property
    @abstractmethod
    def locations(self) -> LocationRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


class PlacesService(ABC):
    @abstractmethod
    async def resolve(self, place_id: str) -> ResolvedPlace:
        pass


class PasswordHasher(ABC):
    @abstractmethod
    def hash(self, plain: str) -> str:
        pass

    @abstractmethod
    def verify(self, plain: str, hashed: str) -> bool:
        pass


class TokenService(ABC):
    @abstractmethod
    def issue(self, user: User) -> str:
        pass

    @abstractmethod
    def verify(self, token: str) -> Principal:
        pass
