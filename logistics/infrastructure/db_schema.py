from sqlalchemy import (
    Table, Column, String, Integer, Float, Enum, DateTime, MetaData, Index, UniqueConstraint
)
from sqlalchemy.sql import func

from logistics.domain.models import OrderStatus, UserRole

metadata = MetaData()


def _enum(enum_cls, name: str) -> Enum:
    # store values ("in_transit"), not member names
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


users_tbl = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False, unique=True, index=True),
    Column("password_hash", String, nullable=False),
    Column("role", _enum(UserRole, "user_role"), nullable=False, default=UserRole.USER),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)


trucks_tbl = Table(
    "trucks",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("year", String, nullable=False),
    Column("color", String, nullable=False),
    Column("plates", String, nullable=False, unique=True, index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)


locations_tbl = Table(
    "locations",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("place_id", String, nullable=False),
    Column("address", String, nullable=False),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    UniqueConstraint("user_id", "place_id", name="uq_locations_user_place")
)


orders_tbl = Table(
    "orders",
    metadata,
    # insertion order, breaks created_at ties
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True, index=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("truck_id", String(36), nullable=False, index=True),
    Column("pickup_id", String(36), nullable=False),
    Column("dropoff_id", String(36), nullable=False),
    Column("status", _enum(OrderStatus, "order_status"), nullable=False, default=OrderStatus.CREATED, index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    Index("ix_orders_user_status_created", "user_id", "status", "created_at"),
    Index("ix_orders_truck_status", "truck_id", "status")
)
