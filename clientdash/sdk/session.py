"""
Session context for the API access layer.

A :class:`SessionContext` is passed explicitly to every ``ApiService`` call.
It owns the bearer token (through a :class:`TokenStore`) and the profile of
the signed-in user.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol, Union

from clientdash.sdk.models import User

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Keeps the token for the lifetime of the process."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """
    Persists the token in a JSON file readable only by the current user, so
    separate CLI invocations share one session.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token store {self.path}: {e}")
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # The mode argument only applies when the file is created
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump({"token": token}, fh)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class SessionContext:
    """
    Authenticated identity plus access token.

    Lifecycle: ``begin(user)`` after a successful login or registration,
    ``clear()`` on logout or when the token is rejected. The token survives
    restarts when the store is persistent; ``user`` is only known in-process
    until ``fetch_profile`` fills it in.
    """

    def __init__(self, store: Optional[TokenStore] = None):
        self.store = store if store is not None else MemoryTokenStore()
        self.user: Optional[User] = None

    @property
    def token(self) -> Optional[str]:
        return self.store.load()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def begin(self, user: User) -> None:
        if not user.token:
            raise ValueError("Cannot begin a session without a token")
        self.store.save(user.token)
        self.user = user

    def clear(self) -> None:
        self.store.clear()
        self.user = None

    def auth_headers(self) -> dict:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}
