from __future__ import annotations

import httpx


class RemoteError(Exception):
    """Raised by the collection client for any failed backend call.

    ``status`` is the HTTP status code, or 0 when the request never got a
    response. ``data`` carries the backend's field-keyed validation payload.
    """

    def __init__(self, message: str, *, status: int = 0, data: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data or {}

    @classmethod
    def from_response(cls, response: httpx.Response) -> RemoteError:
        message = f"Request failed with status {response.status_code}."
        data: dict = {}
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            if isinstance(body.get("message"), str) and body["message"].strip():
                message = body["message"].strip()
            if isinstance(body.get("data"), dict):
                data = body["data"]
        return cls(message, status=response.status_code, data=data)

    @classmethod
    def from_transport(cls, exc: httpx.HTTPError) -> RemoteError:
        return cls(str(exc) or exc.__class__.__name__, status=0)
