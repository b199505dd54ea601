import pytest
from fastapi import status


def inquiry(receiver, prop, **overrides):
    body = {
        "receiver": receiver["id"],
        "property": prop["id"],
        "subject": "Is the flat still available?",
        "content": "Hi, I would like to view it this weekend.",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_send_message(client, auth_headers, tenant, landlord, make_property):
    prop = await make_property()

    response = await client.post("/api/messages", json=inquiry(landlord, prop), headers=auth_headers(tenant))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["sender"]["id"] == tenant["id"]
    assert data["receiver"] == {
        "id": landlord["id"], "name": landlord["name"], "email": landlord["email"], "phone": landlord["phone"],
    }
    assert data["property"] == {"id": prop["id"], "title": prop["title"]}
    assert data["type"] == "inquiry"
    assert data["isRead"] is False


@pytest.mark.asyncio
async def test_send_viewing_request(client, auth_headers, tenant, landlord, make_property):
    prop = await make_property()
    body = inquiry(landlord, prop, viewingRequest={"requestedDate": "2026-11-07", "requestedTime": "10:00"})

    response = await client.post("/api/messages", json=body, headers=auth_headers(tenant))
    assert response.status_code == status.HTTP_201_CREATED
    viewing = response.json()["data"]["viewingRequest"]
    assert viewing["requestedDate"] == "2026-11-07"
    assert viewing["status"] == "pending"


@pytest.mark.asyncio
async def test_cannot_message_yourself(client, auth_headers, landlord, make_property):
    prop = await make_property()

    response = await client.post("/api/messages", json=inquiry(landlord, prop), headers=auth_headers(landlord))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "You cannot send a message to yourself"


@pytest.mark.asyncio
async def test_message_to_unknown_receiver_or_property(client, auth_headers, tenant, landlord, make_property):
    prop = await make_property()

    response = await client.post(
        "/api/messages", json=inquiry({"id": "ghost"}, prop), headers=auth_headers(tenant),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = await client.post(
        "/api/messages", json=inquiry(landlord, {"id": "ghost"}), headers=auth_headers(tenant),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_list_messages_with_unread_count(client, auth_headers, tenant, landlord, make_property):
    prop = await make_property()
    for i in range(3):
        await client.post(
            "/api/messages", json=inquiry(landlord, prop, subject=f"Question {i}"), headers=auth_headers(tenant),
        )

    body = (await client.get("/api/messages?limit=2", headers=auth_headers(landlord))).json()
    assert body["count"] == 2
    assert body["unread"] == 3
    assert [m["subject"] for m in body["data"]] == ["Question 2", "Question 1"]
    assert body["pagination"] == {"next": {"page": 2, "limit": 2}}

    # The sender sees the thread too, but none of it is unread for them
    body = (await client.get("/api/messages", headers=auth_headers(tenant))).json()
    assert body["count"] == 3
    assert body["unread"] == 0


@pytest.mark.asyncio
async def test_mark_read(client, auth_headers, tenant, landlord, make_property):
    prop = await make_property()
    sent = await client.post("/api/messages", json=inquiry(landlord, prop), headers=auth_headers(tenant))
    message_id = sent.json()["data"]["id"]

    response = await client.put(f"/api/messages/{message_id}/read", headers=auth_headers(tenant))
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await client.put(f"/api/messages/{message_id}/read", headers=auth_headers(landlord))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["isRead"] is True
    assert data["readAt"] is not None

    body = (await client.get("/api/messages", headers=auth_headers(landlord))).json()
    assert body["unread"] == 0


@pytest.mark.asyncio
async def test_mark_read_missing_message(client, auth_headers, landlord):
    response = await client.put("/api/messages/nothing-here/read", headers=auth_headers(landlord))
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_conversation_is_oldest_first(client, auth_headers, tenant, landlord, other_landlord, make_property):
    prop = await make_property()
    other = await make_property(title="Somebody else's flat")

    await client.post("/api/messages", json=inquiry(landlord, prop, subject="First"), headers=auth_headers(tenant))
    await client.post(
        "/api/messages",
        json=inquiry(tenant, prop, subject="Reply", type="response"),
        headers=auth_headers(landlord),
    )
    await client.post("/api/messages", json=inquiry(landlord, other, subject="Unrelated"), headers=auth_headers(tenant))
    await client.post(
        "/api/messages", json=inquiry(other_landlord, prop, subject="Elsewhere"), headers=auth_headers(tenant),
    )

    response = await client.get(
        f"/api/messages/conversation/{landlord['id']}/{prop['id']}", headers=auth_headers(tenant),
    )
    body = response.json()
    assert body["count"] == 2
    assert [m["subject"] for m in body["data"]] == ["First", "Reply"]


@pytest.mark.asyncio
async def test_messages_require_authentication(client):
    response = await client.get("/api/messages")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
