from typing import Optional, List, Sequence, Tuple
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from logistics.domain.exceptions import ConflictError
from logistics.domain.models import (
    Order, OrderFilters, OrderStat, OrderStatus, User, UserRole, Truck, Location
)
from logistics.infrastructure.db_schema import orders_tbl, users_tbl, trucks_tbl, locations_tbl
from logistics.application.interfaces import (
    OrderRepository, UserRepository, TruckRepository, LocationRepository
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _SQLAlchemyRepository:
    _conflict_message = "Record already exists"

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _execute_write(self, stmt):
        """Run an INSERT/UPDATE, turning unique violations into ConflictError"""
        try:
            return await self._session.execute(stmt)
        except IntegrityError as e:
            raise ConflictError(self._conflict_message) from e


class SQLAlchemyOrderRepository(_SQLAlchemyRepository, OrderRepository):
    _conflict_message = "Order already exists"

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            user_id=order.user_id,
            truck_id=order.truck_id,
            pickup_id=order.pickup_id,
            dropoff_id=order.dropoff_id,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        await self._execute_write(stmt)

    async def list(self, filters: OrderFilters, offset: int, limit: int) -> Tuple[List[Order], int]:
        conditions = []
        if filters.status:
            conditions.append(orders_tbl.c.status == filters.status)
        if filters.truck_id:
            conditions.append(orders_tbl.c.truck_id == filters.truck_id)
        if filters.user_id:
            conditions.append(orders_tbl.c.user_id == filters.user_id)

        result = await self._session.execute(
            select(orders_tbl)
            .where(*conditions)
            .order_by(orders_tbl.c.created_at.desc(), orders_tbl.c.seq.desc())
            .offset(offset)
            .limit(limit)
        )
        total = await self._session.scalar(
            select(func.count()).select_from(orders_tbl).where(*conditions)
        )
        return [self._to_domain(row) for row in result.fetchall()], total or 0

    async def update_refs(self, order_id: str, values: dict) -> None:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(**values, updated_at=_now())
        )
        await self._execute_write(stmt)

    async def update_status_if(self, order_id: str, expected: OrderStatus, status: OrderStatus) -> bool:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id, orders_tbl.c.status == expected)
            .values(status=status, updated_at=_now())
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, order_id: str) -> bool:
        result = await self._session.execute(
            delete(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        return result.rowcount > 0

    async def count_by_status(self, user_id: Optional[str] = None) -> List[OrderStat]:
        stmt = (
            select(orders_tbl.c.status, func.count().label("total"))
            .group_by(orders_tbl.c.status)
        )
        if user_id is not None:
            stmt = stmt.where(orders_tbl.c.user_id == user_id)
        result = await self._session.execute(stmt)
        stats = [OrderStat(status=OrderStatus(row.status), total=row.total) for row in result.fetchall()]
        return sorted(stats, key=lambda s: s.status.value)

    def _to_domain(self, row) -> Order:
        return Order(
            id=row.id,
            user_id=row.user_id,
            truck_id=row.truck_id,
            pickup_id=row.pickup_id,
            dropoff_id=row.dropoff_id,
            status=OrderStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyUserRepository(_SQLAlchemyRepository, UserRepository):
    _conflict_message = "Email already in use"

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id == user_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.email == email)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_many(self, ids: Sequence[str]) -> List[User]:
        if not ids:
            return []
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id.in_(set(ids)))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, user: User) -> None:
        stmt = insert(users_tbl).values(
            id=user.id,
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at
        )
        await self._execute_write(stmt)

    async def list(self, offset: int, limit: int, search: Optional[str] = None) -> Tuple[List[User], int]:
        conditions = []
        if search:
            # search text is literal, % and _ included
            escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            conditions.append(or_(
                users_tbl.c.name.ilike(pattern, escape="\\"),
                users_tbl.c.email.ilike(pattern, escape="\\")
            ))

        result = await self._session.execute(
            select(users_tbl)
            .where(*conditions)
            .order_by(users_tbl.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        total = await self._session.scalar(
            select(func.count()).select_from(users_tbl).where(*conditions)
        )
        return [self._to_domain(row) for row in result.fetchall()], total or 0

    async def update(self, user_id: str, values: dict) -> None:
        stmt = (
            update(users_tbl)
            .where(users_tbl.c.id == user_id)
            .values(**values, updated_at=_now())
        )
        await self._execute_write(stmt)

    async def delete(self, user_id: str) -> bool:
        result = await self._session.execute(
            delete(users_tbl).where(users_tbl.c.id == user_id)
        )
        return result.rowcount > 0

    def _to_domain(self, row) -> User:
        return User(
            id=row.id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            role=UserRole(row.role),
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyTruckRepository(_SQLAlchemyRepository, TruckRepository):
    _conflict_message = "Plates already exist"

    async def get_by_id(self, truck_id: str) -> Optional[Truck]:
        result = await self._session.execute(
            select(trucks_tbl).where(trucks_tbl.c.id == truck_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def exists(self, truck_id: str) -> bool:
        result = await self._session.execute(
            select(trucks_tbl.c.id).where(trucks_tbl.c.id == truck_id)
        )
        return result.fetchone() is not None

    async def get_many(self, ids: Sequence[str]) -> List[Truck]:
        if not ids:
            return []
        result = await self._session.execute(
            select(trucks_tbl).where(trucks_tbl.c.id.in_(set(ids)))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, truck: Truck) -> None:
        stmt = insert(trucks_tbl).values(
            id=truck.id,
            user_id=truck.user_id,
            year=truck.year,
            color=truck.color,
            plates=truck.plates,
            created_at=truck.created_at,
            updated_at=truck.updated_at
        )
        await self._execute_write(stmt)

    async def list(self, user_id: Optional[str] = None) -> List[Truck]:
        stmt = select(trucks_tbl).order_by(trucks_tbl.c.created_at.desc())
        if user_id is not None:
            stmt = stmt.where(trucks_tbl.c.user_id == user_id)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.fetchall()]

    async def update(self, truck_id: str, values: dict) -> None:
        stmt = (
            update(trucks_tbl)
            .where(trucks_tbl.c.id == truck_id)
            .values(**values, updated_at=_now())
        )
        await self._execute_write(stmt)

    async def delete(self, truck_id: str) -> bool:
        result = await self._session.execute(
            delete(trucks_tbl).where(trucks_tbl.c.id == truck_id)
        )
        return result.rowcount > 0

    def _to_domain(self, row) -> Truck:
        return Truck(
            id=row.id,
            user_id=row.user_id,
            year=row.year,
            color=row.color,
            plates=row.plates,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyLocationRepository(_SQLAlchemyRepository, LocationRepository):
    _conflict_message = "Location already exists for this user"

    async def get_by_id(self, location_id: str) -> Optional[Location]:
        result = await self._session.execute(
            select(locations_tbl).where(locations_tbl.c.id == location_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def exists(self, location_id: str) -> bool:
        result = await self._session.execute(
            select(locations_tbl.c.id).where(locations_tbl.c.id == location_id)
        )
        return result.fetchone() is not None

    async def get_many(self, ids: Sequence[str]) -> List[Location]:
        if not ids:
            return []
        result = await self._session.execute(
            select(locations_tbl).where(locations_tbl.c.id.in_(set(ids)))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def get_by_place(self, user_id: str, place_id: str) -> Optional[Location]:
        result = await self._session.execute(
            select(locations_tbl).where(
                locations_tbl.c.user_id == user_id,
                locations_tbl.c.place_id == place_id
            )
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, location: Location) -> None:
        stmt = insert(locations_tbl).values(
            id=location.id,
            user_id=location.user_id,
            place_id=location.place_id,
            address=location.address,
            latitude=location.latitude,
            longitude=location.longitude,
            created_at=location.created_at,
            updated_at=location.updated_at
        )
        await self._execute_write(stmt)

    async def list_by_user(self, user_id: str, offset: int, limit: int) -> Tuple[List[Location], int]:
        condition = locations_tbl.c.user_id == user_id
        result = await self._session.execute(
            select(locations_tbl)
            .where(condition)
            .order_by(locations_tbl.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        total = await self._session.scalar(
            select(func.count()).select_from(locations_tbl).where(condition)
        )
        return [self._to_domain(row) for row in result.fetchall()], total or 0

    async def update(self, location_id: str, values: dict) -> None:
        stmt = (
            update(locations_tbl)
            .where(locations_tbl.c.id == location_id)
            .values(**values, updated_at=_now())
        )
        await self._execute_write(stmt)

    async def delete(self, location_id: str, user_id: str) -> bool:
        result = await self._session.execute(
            delete(locations_tbl).where(
                locations_tbl.c.id == location_id,
                locations_tbl.c.user_id == user_id
            )
        )
        return result.rowcount > 0

    def _to_domain(self, row) -> Location:
        return Location(
            id=row.id,
            user_id=row.user_id,
            place_id=row.place_id,
            address=row.address,
            latitude=row.latitude,
            longitude=row.longitude,
            created_at=row.created_at,
            updated_at=row.updated_at
        )
