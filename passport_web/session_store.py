"""Client session store.

The browser-side session is four independent string entries: ``token``,
``user`` (a JSON-serialized user record), ``hospitalAuth`` and
``refreshToken``. Writes are not transactional, so a store can hold a token
without a user or the reverse; ``has_partial_session`` reports that state.
A session counts as authenticated when a token is present. Nothing here
checks expiry or signatures.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from flask import current_app, session

from passport_web.utils import build_fernet, decrypt_value, encrypt_value

logger = logging.getLogger("passport-frontend")

TOKEN_KEY = "token"
USER_KEY = "user"
HOSPITAL_AUTH_KEY = "hospitalAuth"
REFRESH_TOKEN_KEY = "refreshToken"

SESSION_KEYS = (TOKEN_KEY, USER_KEY, HOSPITAL_AUTH_KEY, REFRESH_TOKEN_KEY)


class SessionStore(ABC):
    """Typed access to the session entries on top of three primitives."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    @property
    def token(self) -> Optional[str]:
        return self.get(TOKEN_KEY)

    def get_user(self) -> Optional[Dict[str, Any]]:
        raw = self.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except ValueError:
            logger.warning("Stored user record is not valid JSON, ignoring it")
            return None
        return user if isinstance(user, dict) else None

    def save_session(self, token: str, user: Dict[str, Any], refresh_token: Optional[str] = None) -> None:
        """Start a new signed-in session; leftovers of the previous one are dropped."""
        self.remove(HOSPITAL_AUTH_KEY)
        self.remove(REFRESH_TOKEN_KEY)
        self.set(TOKEN_KEY, token)
        self.save_user(user)
        if refresh_token:
            self.set(REFRESH_TOKEN_KEY, refresh_token)
        if user.get("role") == "hospital":
            self.save_hospital_auth(token, user)

    def save_user(self, user: Dict[str, Any]) -> None:
        self.set(USER_KEY, json.dumps(user))

    def update_user(self, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        user = self.get_user()
        if user is None:
            return None
        user.update(fields)
        self.save_user(user)
        return user

    def save_hospital_auth(self, token: str, hospital: Dict[str, Any]) -> None:
        self.set(HOSPITAL_AUTH_KEY, json.dumps({"token": token, "hospital": hospital}))

    def get_hospital_auth(self) -> Optional[Dict[str, Any]]:
        raw = self.get(HOSPITAL_AUTH_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored hospital auth data is not valid JSON, ignoring it")
            return None
        return data if isinstance(data, dict) else None

    def bearer_token(self) -> Optional[str]:
        """Token for Authorization headers; the hospital marker wins when present."""
        hospital_auth = self.get_hospital_auth()
        if hospital_auth and hospital_auth.get("token"):
            return hospital_auth["token"]
        return self.token

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def has_partial_session(self) -> bool:
        return bool(self.get(TOKEN_KEY)) != bool(self.get(USER_KEY))

    def clear(self) -> None:
        for key in SESSION_KEYS:
            self.remove(key)


class InMemorySessionStore(SessionStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)


class CookieSessionStore(SessionStore):
    """Store backed by the Flask cookie session, optionally Fernet-encrypted."""

    def __init__(self, backing, fernet=None):
        self._backing = backing
        self._fernet = fernet

    def get(self, key):
        value = self._backing.get(key)
        if value is None:
            return None
        return decrypt_value(self._fernet, value)

    def set(self, key, value):
        self._backing[key] = encrypt_value(self._fernet, value)

    def remove(self, key):
        self._backing.pop(key, None)


def get_session_store() -> SessionStore:
    """Session store for the current request."""
    fernet = build_fernet(current_app.config.get("SESSION_ENCRYPTION_KEY"))
    return CookieSessionStore(session, fernet)
