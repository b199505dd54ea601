import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from app.client.api import RentalApiClient
from app.client.session import FileSessionStore, SessionStore
from app.dependencies.store import get_store
from app.main import app
from conftest import PASSWORD


@pytest_asyncio.fixture
async def api(store):
    app.dependency_overrides[get_store] = lambda: store
    async with RentalApiClient("http://test", transport=ASGITransport(app=app)) as api:
        yield api
    app.dependency_overrides = {}


@pytest.mark.asyncio
async def test_register_saves_session(api):
    data = await api.register("Achieng Otieno", "achieng@rentmail.com", "pass1234", "+254733000000")
    assert api.session.is_authenticated
    assert api.session.token == data["token"]
    assert api.session.user["email"] == "achieng@rentmail.com"

    me = await api.me()
    assert me["data"]["id"] == data["user"]["id"]

    await api.logout()
    assert not api.session.is_authenticated


@pytest.mark.asyncio
async def test_landlord_workflow(api, landlord):
    await api.login(landlord["email"], PASSWORD)
    created = await api.create_property({
        "title": "Bedsitter near the university",
        "description": "Affordable single room with shared compound and water all week.",
        "price": 9000,
        "location": {"area": "Parklands", "address": "Limuru Rd"},
        "propertyType": "bedsitter",
        "bedrooms": 0,
        "bathrooms": 1,
        "size": 200,
        "contactPhone": "+254700000001",
        "contactEmail": landlord["email"],
        "availableFrom": "2026-11-15",
    })
    property_id = created["data"]["id"]

    uploaded = await api.upload_images(property_id, [("room.jpg", b"\xff\xd8\xff fake", "image/jpeg")])
    assert len(uploaded["data"]["images"]) == 1

    listing = await api.list_properties(limit=5, propertyType="bedsitter")
    assert [p["id"] for p in listing["data"]] == [property_id]

    found = await api.search_properties(q="university")
    assert found["count"] == 1

    fetched = await api.get_property(property_id)
    assert fetched["data"]["viewCount"] == 1

    mine = await api.my_properties()
    assert mine["count"] == 1

    updated = await api.update_property(property_id, {"price": 9500})
    assert updated["data"]["price"] == 9500

    await api.delete_property(property_id)
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await api.get_property(property_id)
    assert exc_info.value.response.status_code == 404


@pytest.mark.asyncio
async def test_tenant_workflow(api, tenant, landlord, make_property):
    prop = await make_property()
    await api.login(tenant["email"], PASSWORD)

    await api.add_favorite(prop["id"])
    favorites = await api.my_favorites()
    assert [p["id"] for p in favorites["data"]] == [prop["id"]]
    await api.remove_favorite(prop["id"])

    report = await api.report_property(prop["id"], "Photos do not match the unit")
    assert report["data"]["reason"] == "Photos do not match the unit"

    sent = await api.send_message({
        "receiver": landlord["id"], "property": prop["id"],
        "subject": "Viewing", "content": "Can I view on Saturday?",
    })
    inbox = await api.get_messages()
    assert inbox["count"] == 1

    await api.login(landlord["email"], PASSWORD)
    read = await api.mark_as_read(sent["data"]["id"])
    assert read["data"]["isRead"] is True
    thread = await api.get_conversation(tenant["id"], prop["id"])
    assert thread["count"] == 1


@pytest.mark.asyncio
async def test_rejected_token_clears_session(api):
    api.session.save("not-a-real-token", {"id": "someone"})

    with pytest.raises(httpx.HTTPStatusError):
        await api.me()
    assert not api.session.is_authenticated
    assert api.session.user is None


@pytest.mark.asyncio
async def test_update_password_refreshes_session(api, tenant):
    await api.login(tenant["email"], PASSWORD)
    await api.update_password(PASSWORD, "another-one")
    assert api.session.is_authenticated
    assert (await api.me())["data"]["id"] == tenant["id"]

    details = await api.update_details(phone="+254799999999")
    assert details["data"]["phone"] == "+254799999999"


def test_file_session_store_persists(tmp_path):
    path = str(tmp_path / "session.json")
    session = FileSessionStore(path)
    assert not session.is_authenticated

    session.save("token-123", {"id": "u1", "name": "Amina"})
    restored = FileSessionStore(path)
    assert restored.token == "token-123"
    assert restored.user == {"id": "u1", "name": "Amina"}

    restored.clear()
    assert not FileSessionStore(path).is_authenticated


def test_memory_session_store():
    session = SessionStore()
    session.save("abc", None)
    assert session.is_authenticated
    session.clear()
    assert session.token is None
