from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

AuthListener = Callable[[str, "dict | None"], None]


def token_expiry(token: str) -> float | None:
    """Return the ``exp`` claim of a JWT without verifying its signature."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


class AuthStore:
    """Holds the backend auth token and user record for one caller.

    Listeners registered with ``on_change`` are called with ``(token, model)``
    after every ``save`` and ``clear``.
    """

    def __init__(
        self,
        *,
        token: str = "",
        model: dict | None = None,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._token = token or ""
        self._model = model
        self._now = now
        self._listeners: list[AuthListener] = []

    @property
    def token(self) -> str:
        return self._token

    @property
    def model(self) -> dict | None:
        return self._model

    @property
    def is_valid(self) -> bool:
        if not self._token:
            return False
        expiry = token_expiry(self._token)
        if expiry is None:
            return False
        return expiry > self._now()

    def save(self, token: str, model: dict | None) -> None:
        self._token = token or ""
        self._model = model
        self._notify()

    def clear(self) -> None:
        self._token = ""
        self._model = None
        self._notify()

    def on_change(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._token, self._model)
