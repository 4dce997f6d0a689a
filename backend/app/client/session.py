"""
Session bootstrap for API clients.

Keeps "who is logged in" across restarts by persisting the bearer token and
the public account view to a small key/value storage. Restoring adopts the
stored session without asking the server; the first request the server
rejects because of the token clears it again.

Lifecycle: INIT -> (login | restore) -> ACTIVE -> (logout | invalidate) -> CLEARED
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger("client.session")

TOKEN_KEY = "token"
USER_KEY = "user"

# Keys that must never reach client storage even if a server sent them
SENSITIVE_KEYS = frozenset({"password", "confirmPassword", "hashedPassword", "hashed_password"})


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, mostly for tests and short-lived scripts."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage:
    """Storage backed by one JSON object on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Session file %s is unreadable; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SessionState(Enum):
    INIT = "init"
    ACTIVE = "active"
    CLEARED = "cleared"


class SessionContext:
    """The single holder of the current client identity."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.state = SessionState.INIT
        self.token: Optional[str] = None
        self.user: Optional[dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and (self.user or {}).get("role") == "admin"

    @property
    def user_id(self) -> Optional[str]:
        return (self.user or {}).get("id") if self.user else None

    def auth_header(self) -> dict[str, str]:
        if self.is_authenticated and self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def restore(self) -> bool:
        """Adopt a previously persisted session, if both token and profile are present."""
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            self._clear()
            return False

        try:
            user = json.loads(raw_user)
        except ValueError:
            logger.warning("Stored user profile is corrupt; clearing session")
            self._clear()
            return False
        if not isinstance(user, dict):
            self._clear()
            return False

        self.token = token
        self.user = user
        self.state = SessionState.ACTIVE
        return True

    def login(self, token: str, user: dict[str, Any]) -> None:
        """Make ``user`` the active identity and persist it."""
        public = {k: v for k, v in user.items() if k not in SENSITIVE_KEYS}
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(public))
        self.token = token
        self.user = public
        self.state = SessionState.ACTIVE
        logger.info("Session started for %s", public.get("email"))

    def update_user(self, user: dict[str, Any]) -> None:
        """Refresh the stored profile after a profile edit; the token is unchanged."""
        if not self.is_authenticated or self.token is None:
            return
        self.login(self.token, user)

    def logout(self) -> None:
        self._clear()

    def invalidate(self) -> None:
        """The server rejected our token (expired or invalid)."""
        if self.state is SessionState.ACTIVE:
            logger.info("Session invalidated by server response")
        self._clear()

    def _clear(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self.token = None
        self.user = None
        self.state = SessionState.CLEARED
