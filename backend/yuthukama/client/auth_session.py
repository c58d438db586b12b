"""
Client-side holder of the signed-in user and bearer token.

State moves between loading, authenticated and anonymous. Credentials live
in an injected CredentialStore so the same logic works against any
key-value store.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from yuthukama.client.transport import ApiClient, ChatGatewayError
from yuthukama.schemas.auth import AuthOut, UserOut

logger = logging.getLogger(__name__)

LOADING = "loading"
AUTHENTICATED = "authenticated"
ANONYMOUS = "anonymous"

TOKEN_KEY = "token"
USER_KEY = "user"


class CredentialStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCredentialStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class AuthGateway(ApiClient):
    def check(self, token: str) -> UserOut:
        return self._request("POST", "/api/auth/check", "Not authorized", token=token, model=UserOut)

    def login(self, email: str, password: str) -> AuthOut:
        return self._request(
            "POST", "/api/auth/login", "Login failed", model=AuthOut,
            json={"email": email, "password": password},
        )

    def register(self, username: str, email: str, password: str) -> AuthOut:
        return self._request(
            "POST", "/api/auth/register", "Registration failed", model=AuthOut,
            json={"username": username, "email": email, "password": password},
        )

    def logout(self, token: Optional[str]) -> None:
        self._request("POST", "/api/auth/logout", "Logout failed", token=token)


class AuthSession:
    def __init__(self, gateway: AuthGateway, store: CredentialStore):
        self.gateway = gateway
        self.store = store
        self.state = LOADING
        self.user: Optional[UserOut] = None
        self._started = False

    @property
    def token(self) -> Optional[str]:
        return self.store.get(TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.state == AUTHENTICATED

    def start(self) -> str:
        """Verify persisted credentials. Runs the check at most once per session."""
        if self._started:
            return self.state
        self._started = True

        token = self.store.get(TOKEN_KEY)
        if not token:
            self._become_anonymous()
            return self.state

        try:
            user = self.gateway.check(token)
        except ChatGatewayError as e:
            logger.info("Stored credentials rejected: %s", e.message)
            self._become_anonymous()
            return self.state

        self._become_authenticated(user, token)
        return self.state

    def login(self, email: str, password: str) -> UserOut:
        """Sign in. A failure propagates and leaves the state as it was."""
        auth = self.gateway.login(email, password)
        return self._establish(auth)

    def register(self, username: str, email: str, password: str) -> UserOut:
        auth = self.gateway.register(username, email, password)
        return self._establish(auth)

    def logout(self) -> None:
        """Tell the server, but sign out locally whether or not it answers."""
        token = self.store.get(TOKEN_KEY)
        try:
            self.gateway.logout(token)
        except ChatGatewayError as e:
            logger.warning("Server logout failed: %s", e.message)
        self._become_anonymous()

    def _establish(self, auth: AuthOut) -> UserOut:
        user = UserOut(id=auth.id, username=auth.username, email=auth.email)
        self._become_authenticated(user, auth.token)
        return user

    def _become_authenticated(self, user: UserOut, token: str) -> None:
        self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, user.model_dump_json())
        self.user = user
        self.state = AUTHENTICATED

    def _become_anonymous(self) -> None:
        self.store.clear()
        self.user = None
        self.state = ANONYMOUS
