from __future__ import annotations

from starlette.requests import Request

from pubshare.remote.auth_store import AuthStore

SESSION_TOKEN_KEY = "auth_token"
SESSION_MODEL_KEY = "auth_model"


def _write_session(request: Request, token: str, model: dict | None) -> None:
    if token:
        request.session[SESSION_TOKEN_KEY] = token
        request.session[SESSION_MODEL_KEY] = model or {}
    else:
        request.session.pop(SESSION_TOKEN_KEY, None)
        request.session.pop(SESSION_MODEL_KEY, None)


def session_auth_store(request: Request) -> AuthStore:
    """Build the caller's auth store from the session cookie.

    Any later ``save``/``clear`` on the store is written back to the session.
    """
    model = request.session.get(SESSION_MODEL_KEY)
    store = AuthStore(
        token=str(request.session.get(SESSION_TOKEN_KEY) or ""),
        model=model if isinstance(model, dict) else None,
    )
    store.on_change(lambda token, changed_model: _write_session(request, token, changed_model))
    return store
