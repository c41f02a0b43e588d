import httpx
import pytest

from logistics.config import settings
from logistics.database import get_session_factory
from logistics.domain.models import UserRole, new_id
from logistics.domain.exceptions import GeocodingUnavailableError
from logistics.infrastructure.security import JWTTokenService
from logistics.main import app
from logistics.presentation.dependencies import get_password_hasher, get_places_service
from logistics.presentation.locations_api import get_create_location_use_case
from logistics.presentation.trucks_api import get_list_trucks_use_case

from conftest import FakePlaces


def bearer(user) -> dict:
    tokens = JWTTokenService(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {tokens.issue(user)}"}


@pytest.fixture
async def client(session_factory, hasher):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_places_service] = FakePlaces
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def fleet(seed):
    owner = await seed.user(email="owner@example.com")
    return {
        "owner": owner,
        "stranger": await seed.user(email="stranger@example.com"),
        "admin": await seed.user(email="boss@example.com", role=UserRole.ADMIN),
        "truck": await seed.truck(owner),
        "pickup": await seed.location(owner),
        "dropoff": await seed.location(owner),
    }


async def post_order(client, fleet, **overrides):
    body = {"truck": fleet["truck"].id, "pickup": fleet["pickup"].id, "dropoff": fleet["dropoff"].id}
    body.update(overrides)
    return await client.post("/orders", json=body, headers=bearer(fleet["owner"]))


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"app": "ok", "db": {"state": "connected"}}


async def test_orders_require_a_token(client):
    assert (await client.get("/orders")).status_code == 401
    bad = await client.get("/orders", headers={"Authorization": "Bearer not.a.token"})
    assert bad.status_code == 401


async def test_signup_login_me(client):
    signup = await client.post("/auth/signup", json={"email": "new@example.com", "password": "secret-password"})
    assert signup.status_code == 201

    login = await client.post("/auth/login", json={"email": "new@example.com", "password": "secret-password"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"
    assert "password_hash" not in me.json()

    again = await client.post("/auth/signup", json={"email": "new@example.com", "password": "secret-password"})
    assert again.status_code == 409


async def test_overlong_passwords_are_client_errors(client, fleet):
    too_many_chars = await client.post("/auth/signup", json={"email": "a@example.com", "password": "x" * 80})
    assert too_many_chars.status_code == 422

    too_many_bytes = await client.post("/auth/signup", json={"email": "b@example.com", "password": "é" * 40})
    assert too_many_bytes.status_code == 400

    update = await client.patch(
        f"/users/{fleet['stranger'].id}", json={"password": "é" * 40}, headers=bearer(fleet["admin"])
    )
    assert update.status_code == 400


async def test_create_and_fetch_order(client, fleet):
    created = await post_order(client, fleet)
    assert created.status_code == 201
    order = created.json()
    assert order["status"] == "created"
    assert order["user"] == fleet["owner"].id

    fetched = await client.get(f"/orders/{order['id']}?expand=true", headers=bearer(fleet["owner"]))
    assert fetched.status_code == 200
    assert fetched.json()["truck"]["plates"] == fleet["truck"].plates
    assert fetched.json()["user"]["email"] == "owner@example.com"


async def test_create_with_unknown_truck(client, fleet):
    response = await post_order(client, fleet, truck=new_id())
    assert response.status_code == 404
    assert response.json()["detail"] == "Truck not found"


async def test_create_rejects_unknown_fields(client, fleet):
    response = await post_order(client, fleet, user=fleet["stranger"].id)
    assert response.status_code == 422


async def test_status_lifecycle_over_http(client, fleet):
    order_id = (await post_order(client, fleet)).json()["id"]
    headers = bearer(fleet["owner"])

    skipped = await client.patch(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers)
    assert skipped.status_code == 400
    assert "created" in skipped.json()["detail"]

    moved = await client.patch(f"/orders/{order_id}/status", json={"status": "In Transit"}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["status"] == "in_transit"

    unknown = await client.patch(f"/orders/{order_id}/status", json={"status": "lost"}, headers=headers)
    assert unknown.status_code == 422


async def test_update_cannot_touch_status(client, fleet):
    order_id = (await post_order(client, fleet)).json()["id"]
    response = await client.patch(
        f"/orders/{order_id}", json={"status": "completed"}, headers=bearer(fleet["owner"])
    )
    assert response.status_code == 422


async def test_stranger_is_forbidden_admin_is_not(client, fleet):
    order_id = (await post_order(client, fleet)).json()["id"]

    for method, path, body in [
        ("GET", f"/orders/{order_id}", None),
        ("PATCH", f"/orders/{order_id}", {"truck": fleet["truck"].id}),
        ("PATCH", f"/orders/{order_id}/status", {"status": "in_transit"}),
        ("DELETE", f"/orders/{order_id}", None),
    ]:
        denied = await client.request(method, path, json=body, headers=bearer(fleet["stranger"]))
        assert denied.status_code == 403, (method, path)

    admin = bearer(fleet["admin"])
    assert (await client.get(f"/orders/{order_id}", headers=admin)).status_code == 200
    deleted = await client.delete(f"/orders/{order_id}", headers=admin)
    assert deleted.json() == {"deleted": True}
    assert (await client.get(f"/orders/{order_id}", headers=admin)).status_code == 404


async def test_list_and_stats(client, fleet):
    for _ in range(3):
        await post_order(client, fleet)

    page = await client.get("/orders?page=2&limit=2", headers=bearer(fleet["owner"]))
    assert page.status_code == 200
    body = page.json()
    assert (body["page"], body["limit"], body["total"], body["pages"]) == (2, 2, 3, 2)
    assert len(body["items"]) == 1

    mine = await client.get(f"/orders?user={fleet['owner'].id}", headers=bearer(fleet["stranger"]))
    assert mine.json()["total"] == 0
    assert mine.json()["pages"] == 1

    stats = await client.get("/orders/stats/status", headers=bearer(fleet["admin"]))
    assert stats.json() == [{"status": "created", "total": 3}]


async def test_list_rejects_non_positive_limit(client, fleet):
    response = await client.get("/orders?limit=0", headers=bearer(fleet["owner"]))
    assert response.status_code == 422


async def test_trucks_crud(client, fleet):
    headers = bearer(fleet["owner"])
    created = await client.post("/trucks", json={"year": "2021", "color": "red", "plates": " abc-123 "}, headers=headers)
    assert created.status_code == 201
    truck = created.json()
    assert truck["plates"] == "ABC-123"
    assert truck["user"] == fleet["owner"].id

    duplicate = await client.post("/trucks", json={"year": "2022", "color": "blue", "plates": "ABC-123"}, headers=headers)
    assert duplicate.status_code == 409

    assert (await client.get(f"/trucks/{truck['id']}", headers=bearer(fleet["stranger"]))).status_code == 403
    listed = await client.get("/trucks", headers=headers)
    assert {t["id"] for t in listed.json()} == {truck["id"], fleet["truck"].id}

    patched = await client.patch(f"/trucks/{truck['id']}", json={"color": "green"}, headers=headers)
    assert patched.json()["color"] == "green"
    assert (await client.delete(f"/trucks/{truck['id']}", headers=headers)).json() == {"deleted": True}
    assert (await client.get(f"/trucks/{truck['id']}", headers=headers)).status_code == 404


async def test_locations_over_http(client, fleet):
    headers = bearer(fleet["stranger"])
    created = await client.post("/locations", json={"place_id": "ChIJ-xyz"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["address"] == "Address of ChIJ-xyz"

    duplicate = await client.post("/locations", json={"place_id": "ChIJ-xyz"}, headers=headers)
    assert duplicate.status_code == 409

    unresolvable = await client.post("/locations", json={"place_id": "bad-place"}, headers=headers)
    assert unresolvable.status_code == 400

    listed = await client.get("/locations", headers=headers)
    assert listed.json()["total"] == 1


async def test_users_admin_only(client, fleet):
    assert (await client.get("/users", headers=bearer(fleet["owner"]))).status_code == 403

    admin = bearer(fleet["admin"])
    found = await client.get("/users?search=STRANGER", headers=admin)
    assert found.status_code == 200
    assert [u["email"] for u in found.json()["items"]] == ["stranger@example.com"]

    promoted = await client.patch(f"/users/{fleet['stranger'].id}", json={"role": "admin"}, headers=admin)
    assert promoted.json()["role"] == "admin"

    clash = await client.patch(f"/users/{fleet['stranger'].id}", json={"email": "owner@example.com"}, headers=admin)
    assert clash.status_code == 409


async def test_user_search_treats_wildcards_literally(client, fleet, seed):
    await seed.user(email="a_b@example.com")
    await seed.user(email="axb@example.com")
    admin = bearer(fleet["admin"])

    underscore = await client.get("/users?search=a_b", headers=admin)
    assert [u["email"] for u in underscore.json()["items"]] == ["a_b@example.com"]

    percent = await client.get("/users", params={"search": "%"}, headers=admin)
    assert percent.json()["total"] == 0


async def test_use_case_factories_can_be_overridden(client, fleet):
    class PlacesDown:
        async def __call__(self, data, principal):
            raise GeocodingUnavailableError("Places API unreachable")

    class NoTrucks:
        async def __call__(self, principal):
            return []

    app.dependency_overrides[get_create_location_use_case] = PlacesDown
    app.dependency_overrides[get_list_trucks_use_case] = NoTrucks
    headers = bearer(fleet["owner"])

    unavailable = await client.post("/locations", json={"place_id": "ChIJ-xyz"}, headers=headers)
    assert unavailable.status_code == 503
    assert (await client.get("/trucks", headers=headers)).json() == []
