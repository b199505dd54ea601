"""Client-side session state: the bearer token and the signed-in user."""
import json
import os
from typing import Optional


class SessionStore:
    """Keeps the session for the lifetime of the object."""

    def __init__(self):
        self._token: Optional[str] = None
        self._user: Optional[dict] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[dict]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def save(self, token: str, user: Optional[dict]) -> None:
        self._token = token
        self._user = user

    def clear(self) -> None:
        self._token = None
        self._user = None


class FileSessionStore(SessionStore):
    """A session persisted as JSON so it survives process restarts."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._token = data.get("token")
            self._user = data.get("user")

    def save(self, token: str, user: Optional[dict]) -> None:
        super().save(token, user)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"token": token, "user": user}, f)

    def clear(self) -> None:
        super().clear()
        if os.path.exists(self.path):
            os.remove(self.path)
