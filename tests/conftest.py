from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from logistics.domain.models import User, UserRole, Truck, Location, Principal, ResolvedPlace, new_id
from logistics.domain.exceptions import GeocodingError
from logistics.application.interfaces import PlacesService
from logistics.infrastructure.db_schema import metadata
from logistics.infrastructure.security import BcryptPasswordHasher, JWTTokenService
from logistics.infrastructure.unit_of_work import UnitOfWork

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


class FakePlaces(PlacesService):
    """Resolves every place_id except ones starting with "bad" """

    def __init__(self):
        self.calls = []

    async def resolve(self, place_id: str) -> ResolvedPlace:
        self.calls.append(place_id)
        if place_id.startswith("bad"):
            raise GeocodingError("Could not resolve place_id (NOT_FOUND)")
        return ResolvedPlace(address=f"Address of {place_id}", latitude=19.43, longitude=-99.13)


class Seed:
    """Writes fixture rows straight through the repositories"""

    def __init__(self, uow: UnitOfWork, hasher: BcryptPasswordHasher):
        self._uow = uow
        self._hasher = hasher

    async def user(self, email=None, role=UserRole.USER, password="secret-password") -> User:
        now = datetime.now(timezone.utc)
        user = User(
            id=new_id(),
            name="Test User",
            email=email or f"{new_id()[:8]}@example.com",
            password_hash=self._hasher.hash(password),
            role=role,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            await uow.users.create(user)
            await uow.commit()
        return user

    async def truck(self, owner: User, plates=None) -> Truck:
        now = datetime.now(timezone.utc)
        truck = Truck(
            id=new_id(),
            user_id=owner.id,
            year="2020",
            color="white",
            plates=plates or new_id()[:8].upper(),
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            await uow.trucks.create(truck)
            await uow.commit()
        return truck

    async def location(self, owner: User, place_id=None) -> Location:
        now = datetime.now(timezone.utc)
        location = Location(
            id=new_id(),
            user_id=owner.id,
            place_id=place_id or f"place-{new_id()[:8]}",
            address="Somewhere 1",
            latitude=19.43,
            longitude=-99.13,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            await uow.locations.create(location)
            await uow.commit()
        return location


def principal_of(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def hasher():
    # lowest cost bcrypt accepts
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return JWTTokenService(TEST_SECRET, expires_minutes=5)


@pytest.fixture
def places():
    return FakePlaces()


@pytest.fixture
def seed(uow, hasher):
    return Seed(uow, hasher)
