import os
import tempfile

# Configure before the app (and its settings) are imported
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="rental-uploads-"))

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.security import create_token, hash_password
from app.dependencies.store import get_store
from app.main import app
from app.stores.memory import MemoryStore

PASSWORD = "secret123"


@pytest.fixture
def store():
    return MemoryStore()


@pytest_asyncio.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides = {}


async def _make_user(store, name, email, role):
    return await store.users.insert({
        "name": name,
        "email": email,
        "password": hash_password(PASSWORD),
        "phone": "+254700000001",
        "role": role,
        "profileImage": "",
        "isVerified": False,
        "isActive": True,
        "properties": [],
        "favorites": [],
        "preferredLocations": [],
        "rating": 0,
        "reviewCount": 0,
    })


@pytest_asyncio.fixture
async def landlord(store):
    return await _make_user(store, "Grace Landlord", "grace@rentmail.com", "landlord")


@pytest_asyncio.fixture
async def other_landlord(store):
    return await _make_user(store, "Otieno Landlord", "otieno@rentmail.com", "landlord")


@pytest_asyncio.fixture
async def tenant(store):
    return await _make_user(store, "Tom Tenant", "tom@rentmail.com", "tenant")


@pytest_asyncio.fixture
async def admin(store):
    return await _make_user(store, "Ada Admin", "ada@rentmail.com", "admin")


@pytest.fixture
def auth_headers():
    def build(user):
        return {"Authorization": f"Bearer {create_token(user['id'])}"}
    return build


@pytest.fixture
def make_property(store, landlord):
    """Insert a property straight into the store; keyword arguments override defaults."""
    async def factory(**overrides):
        doc = {
            "title": "Two bedroom apartment",
            "description": "Spacious apartment close to shops and transport.",
            "price": 30000,
            "location": {"area": "Kilimani", "city": "Nairobi", "coordinates": None, "address": "Argwings Kodhek Rd"},
            "propertyType": "apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "size": 800,
            "amenities": ["parking", "water"],
            "images": [],
            "landlord": landlord["id"],
            "isAvailable": True,
            "isVerified": False,
            "isFeatured": False,
            "viewCount": 0,
            "favoriteCount": 0,
            "leaseTerm": "monthly",
            "deposit": 30000,
            "contactPhone": "+254700000001",
            "contactEmail": "grace@rentmail.com",
            "availableFrom": date(2026, 11, 1),
            "reports": [],
            "rating": 0,
            "reviewCount": 0,
        }
        location = overrides.pop("location", None)
        doc.update(overrides)
        if location:
            doc["location"] = {**doc["location"], **location}
        doc = await store.properties.insert(doc)
        await store.users.push(doc["landlord"], "properties", doc["id"])
        return doc
    return factory
