"""Fixtures for API tests: the real app against a temporary database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_uow
from src.api.main import app
from src.application.services import get_notification_dispatcher


@pytest.fixture
async def client(uow_factory) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_uow] = lambda: uow_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await get_notification_dispatcher().drain()
    app.dependency_overrides.pop(get_uow, None)


@pytest.fixture
async def acting_user(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/users",
        json={"email": "planner@example.com", "first_name": "Pat", "last_name": "Planner"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def headers(acting_user: dict) -> dict[str, str]:
    return {"X-User-Id": str(acting_user["id"])}


@pytest.fixture
def register_product(client: AsyncClient, headers: dict[str, str]):
    """Factory: POST a product and return its JSON body."""
    counter = {"n": 0}

    async def _register(quantity: int = 0, **fields) -> dict:
        counter["n"] += 1
        body = {
            "sku": f"API-{counter['n']:03d}",
            "name": f"Part {counter['n']}",
            "category": "General",
            "unit_cost": 4.0,
            "location": "B-02",
            "initial_quantity": quantity,
        }
        body.update(fields)
        response = await client.post("/api/products", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _register
