"""
CHAIN - Test Configuration and Fixtures
"""
import os

# Set testing environment before config is imported
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("MONGO_URI", None)
os.environ.pop("CHAIN_DATA_DIR", None)

from typing import Any, AsyncGenerator, Dict, Optional

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient

from client import ChainClient
from main import app
from routes import get_stores
from stores import Stores
from stores.memory import MemoryDatabase

fake = Faker()


def make_payload(resource: str, user_id: Optional[str] = None) -> Dict[str, Any]:
    """A complete, valid request body for ``resource``."""
    if resource == "users":
        return {
            "name": fake.name(),
            "email": fake.unique.email(),
            "user": fake.user_name(),
            "pwd": "senha123",
            "level": "1",
            "status": "on",
        }
    if resource == "teachers":
        return {
            "id": user_id,
            "school_disciplines": "Math, Science",
            "contact": fake.email(),
            "phone_number": fake.phone_number(),
            "status": "on",
        }
    if resource == "students":
        return {
            "id": user_id,
            "age": "9",
            "parents": fake.name(),
            "phone_number": fake.phone_number(),
            "special_needs": "Dyslexia",
            "status": "on",
        }
    if resource == "professionals":
        return {
            "name": fake.name(),
            "specialty": "Speech therapy",
            "contact": fake.email(),
            "phone_number": fake.phone_number(),
            "status": "on",
        }
    if resource == "events":
        return {"description": "Talk", "comments": "Parents meeting", "date": "2024-09-16T16:00:00Z"}
    if resource == "appointments":
        return {
            "specialty": "Psychology",
            "comments": "First session",
            "date": "2024-09-20",
            "student": fake.name(),
            "professional": fake.name(),
        }
    raise ValueError(resource)


@pytest.fixture
def stores() -> Stores:
    """Fresh in-memory stores for each test"""
    return Stores(MemoryDatabase())


@pytest.fixture
async def client(stores: Stores) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with the stores dependency overridden"""
    app.dependency_overrides[get_stores] = lambda: stores

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def api(stores: Stores) -> AsyncGenerator[ChainClient, None]:
    """ChainClient talking to the app in-process"""
    app.dependency_overrides[get_stores] = lambda: stores

    async with ChainClient(base_url="http://test", transport=ASGITransport(app=app)) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def user(client: AsyncClient) -> Dict[str, Any]:
    """A stored User"""
    response = await client.post("/users", json=make_payload("users"))
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def payload_for(user: Dict[str, Any]):
    """Valid payload builder; Student/Teacher payloads point at ``user``"""
    def build(resource: str) -> Dict[str, Any]:
        return make_payload(resource, user_id=user["id"])
    return build
