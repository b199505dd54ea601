from typing import Any, Dict, List, Optional, Tuple

import httpx
from structlog import get_logger

from app.client.session import SessionStore

logger = get_logger()


class SessionAuth(httpx.Auth):
    """Adds the bearer token held by the session store to every request."""

    def __init__(self, session: SessionStore):
        self.session = session

    def auth_flow(self, request: httpx.Request):
        if self.session.token:
            request.headers["Authorization"] = f"Bearer {self.session.token}"
        yield request


class RentalApiClient:
    """
    Async client for the marketplace API.

    The session store is injected so callers decide where tokens live. Any
    401 response clears it.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.session = session or SessionStore()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=SessionAuth(self.session),
            transport=transport,
            timeout=timeout,
            event_hooks={"response": [self._on_response]},
        )

    async def __aenter__(self) -> "RentalApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _on_response(self, response: httpx.Response) -> None:
        if response.status_code == 401 and self.session.is_authenticated:
            logger.info("Session rejected by API; clearing", url=str(response.request.url))
            self.session.clear()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    # -- auth

    async def register(self, name: str, email: str, password: str, phone: str, role: str = "tenant") -> dict:
        data = await self._request("POST", "/api/auth/register", json={
            "name": name, "email": email, "password": password, "phone": phone, "role": role,
        })
        self.session.save(data["token"], data["user"])
        return data

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.save(data["token"], data["user"])
        return data

    async def logout(self) -> None:
        try:
            if self.session.is_authenticated:
                await self._request("POST", "/api/auth/logout")
        finally:
            self.session.clear()

    async def me(self) -> dict:
        return await self._request("GET", "/api/auth/me")

    async def update_details(self, **details) -> dict:
        return await self._request("PUT", "/api/auth/updatedetails", json=details)

    async def update_password(self, current_password: str, new_password: str) -> dict:
        data = await self._request("PUT", "/api/auth/updatepassword", json={
            "currentPassword": current_password, "newPassword": new_password,
        })
        self.session.save(data["token"], data["user"])
        return data

    # -- properties

    async def list_properties(self, page: int = 1, limit: int = 10, **filters) -> dict:
        params = {"page": page, "limit": limit, **filters}
        return await self._request("GET", "/api/properties", params=params)

    async def search_properties(self, **params) -> dict:
        return await self._request("GET", "/api/properties/search", params=params)

    async def get_property(self, property_id: str) -> dict:
        return await self._request("GET", f"/api/properties/{property_id}")

    async def create_property(self, data: dict) -> dict:
        return await self._request("POST", "/api/properties", json=data)

    async def update_property(self, property_id: str, data: dict) -> dict:
        return await self._request("PUT", f"/api/properties/{property_id}", json=data)

    async def delete_property(self, property_id: str) -> dict:
        return await self._request("DELETE", f"/api/properties/{property_id}")

    async def upload_images(self, property_id: str, files: List[Tuple[str, bytes, str]]) -> dict:
        """``files`` are ``(filename, content, content_type)`` triples."""
        multipart = [("images", file) for file in files]
        return await self._request("PUT", f"/api/properties/{property_id}/images", files=multipart)

    async def add_favorite(self, property_id: str) -> dict:
        return await self._request("POST", f"/api/properties/{property_id}/favorite")

    async def remove_favorite(self, property_id: str) -> dict:
        return await self._request("DELETE", f"/api/properties/{property_id}/favorite")

    async def report_property(self, property_id: str, reason: str, description: Optional[str] = None) -> dict:
        return await self._request(
            "POST", f"/api/properties/{property_id}/report",
            json={"reason": reason, "description": description},
        )

    # -- users

    async def my_properties(self) -> dict:
        return await self._request("GET", "/api/users/properties")

    async def my_favorites(self) -> dict:
        return await self._request("GET", "/api/users/favorites")

    # -- messages

    async def get_messages(self, page: int = 1, limit: int = 20) -> dict:
        return await self._request("GET", "/api/messages", params={"page": page, "limit": limit})

    async def send_message(self, data: dict) -> dict:
        return await self._request("POST", "/api/messages", json=data)

    async def mark_as_read(self, message_id: str) -> dict:
        return await self._request("PUT", f"/api/messages/{message_id}/read")

    async def get_conversation(self, user_id: str, property_id: str) -> dict:
        return await self._request("GET", f"/api/messages/conversation/{user_id}/{property_id}")
