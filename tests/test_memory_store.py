import pytest

from app.core.errors import DuplicateKeyError
from app.services.predicates import Equals, FullText, Range, where
from app.stores.memory import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.mark.asyncio
async def test_insert_assigns_id_and_timestamps(store):
    first = await store.messages.insert({"subject": "one"})
    second = await store.messages.insert({"subject": "two"})
    assert first["id"] and first["id"] != second["id"]
    assert first["createdAt"] < second["createdAt"]
    assert first["createdAt"] == first["updatedAt"]


@pytest.mark.asyncio
async def test_returned_documents_are_copies(store):
    doc = await store.properties.insert({"title": "Flat", "amenities": ["pool"]})
    doc["amenities"].append("gym")
    assert (await store.properties.find_by_id(doc["id"]))["amenities"] == ["pool"]


@pytest.mark.asyncio
async def test_unique_email(store):
    await store.users.insert({"email": "grace@rentmail.com"})
    with pytest.raises(DuplicateKeyError) as exc_info:
        await store.users.insert({"email": "grace@rentmail.com"})
    assert exc_info.value.field == "email"

    other = await store.users.insert({"email": "otieno@rentmail.com"})
    with pytest.raises(DuplicateKeyError):
        await store.users.update(other["id"], {"email": "grace@rentmail.com"})


@pytest.mark.asyncio
async def test_update_is_partial_and_nested(store):
    doc = await store.properties.insert({
        "title": "Flat",
        "location": {"area": "Kilimani", "city": "Nairobi", "coordinates": None},
    })

    updated = await store.properties.update(doc["id"], {
        "location": {"area": "Kileleshwa", "coordinates": {"lat": -1.28, "lng": 36.78}},
    })
    assert updated["title"] == "Flat"
    assert updated["location"] == {
        "area": "Kileleshwa", "city": "Nairobi", "coordinates": {"lat": -1.28, "lng": 36.78},
    }
    assert updated["createdAt"] == doc["createdAt"]
    assert updated["updatedAt"] > doc["updatedAt"]
    assert await store.properties.update("missing", {"title": "x"}) is None


@pytest.mark.asyncio
async def test_increment_with_floor(store):
    doc = await store.properties.insert({"favoriteCount": 0})
    assert (await store.properties.increment(doc["id"], "favoriteCount", 2))["favoriteCount"] == 2
    assert (await store.properties.increment(doc["id"], "favoriteCount", -5, floor=0))["favoriteCount"] == 0
    assert await store.properties.increment("missing", "favoriteCount") is None


@pytest.mark.asyncio
async def test_push_and_pull(store):
    user = await store.users.insert({"email": "tom@rentmail.com", "favorites": []})
    await store.users.push(user["id"], "favorites", "p1", unique=True)
    await store.users.push(user["id"], "favorites", "p1", unique=True)
    await store.users.push(user["id"], "favorites", "p2")
    assert (await store.users.find_by_id(user["id"]))["favorites"] == ["p1", "p2"]

    await store.users.pull(user["id"], "favorites", "p1")
    assert (await store.users.find_by_id(user["id"]))["favorites"] == ["p2"]


@pytest.mark.asyncio
async def test_find_sorts_skips_and_limits(store):
    for price in (300, None, 100, 200):
        await store.properties.insert({"title": f"At {price}", "price": price})

    ascending = await store.properties.find(sort=[("price", False)])
    assert [d["price"] for d in ascending] == [None, 100, 200, 300]

    descending = await store.properties.find(sort=[("price", True)], skip=1, limit=2)
    assert [d["price"] for d in descending] == [200, 100]


@pytest.mark.asyncio
async def test_find_one_and_count(store):
    await store.properties.insert({"title": "Garden cottage", "description": "", "price": 10})
    await store.properties.insert({"title": "City flat", "description": "Near the garden", "price": 20})
    await store.properties.insert({"title": "Penthouse", "description": "Views", "price": 30})

    assert await store.properties.count() == 3
    assert await store.properties.count(where(FullText("garden"))) == 2
    assert await store.properties.count(where(FullText("garden"), Range("price", gte=15))) == 1
    found = await store.properties.find_one(where(Equals("title", "Penthouse")))
    assert found["price"] == 30
    assert await store.properties.find_one(where(Equals("title", "Bungalow"))) is None


@pytest.mark.asyncio
async def test_delete(store):
    doc = await store.messages.insert({"subject": "bye"})
    assert await store.messages.delete(doc["id"]) is True
    assert await store.messages.delete(doc["id"]) is False
    assert await store.ping() is True


@pytest.mark.asyncio
async def test_set_operations_report_changes(store):
    user = await store.users.insert({"email": "amina@rentmail.com", "favorites": []})

    assert await store.users.add_to_set(user["id"], "favorites", "p1") is True
    assert await store.users.add_to_set(user["id"], "favorites", "p1") is False
    assert await store.users.remove_from_set(user["id"], "favorites", "p2") is False
    assert await store.users.remove_from_set(user["id"], "favorites", "p1") is True
    assert (await store.users.find_by_id(user["id"]))["favorites"] == []
    assert await store.users.add_to_set("missing", "favorites", "p1") is False
