from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import quote as url_quote

import httpx

from pubshare.remote.auth_store import AuthStore
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Expression, render_filter
from pubshare.remote.payload import FormPayload

logger = logging.getLogger(__name__)

RecordData = Mapping[str, object] | FormPayload


@dataclass(frozen=True)
class RecordPage:
    items: list[dict]
    page: int = 1
    per_page: int = 30
    total_items: int = 0
    total_pages: int = 0


@dataclass(frozen=True)
class AuthResult:
    token: str
    record: dict = field(default_factory=dict)


def _records_path(collection: str, record_id: str | None = None) -> str:
    path = f"/api/collections/{url_quote(collection, safe='')}/records"
    if record_id is not None:
        path = f"{path}/{url_quote(str(record_id), safe='')}"
    return path


def _page_from_body(body: dict) -> RecordPage:
    items = body.get("items")
    return RecordPage(
        items=[item for item in items if isinstance(item, dict)] if isinstance(items, list) else [],
        page=int(body.get("page") or 1),
        per_page=int(body.get("perPage") or 0),
        total_items=int(body.get("totalItems") or 0),
        total_pages=int(body.get("totalPages") or 0),
    )


class RemoteCollectionClient:
    """Async client for a PocketBase-style record-collection REST API.

    The transport (``httpx.AsyncClient``) can be shared between callers; the
    ``AuthStore`` is per caller and decides which credentials a request carries.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        auth_store: AuthStore | None = None,
    ) -> None:
        self._http = http_client
        self.auth_store = auth_store if auth_store is not None else AuthStore()

    @property
    def base_url(self) -> str:
        return str(self._http.base_url).rstrip("/")

    async def list(
        self,
        collection: str,
        *,
        page: int = 1,
        per_page: int = 30,
        expand: str | None = None,
        sort: str | None = None,
        filter: Expression | str | None = None,
    ) -> RecordPage:
        params: dict[str, object] = {"page": page, "perPage": per_page}
        if expand:
            params["expand"] = expand
        if sort:
            params["sort"] = sort
        rendered = render_filter(filter)
        if rendered:
            params["filter"] = rendered
        response = await self._send("GET", _records_path(collection), params=params)
        return _page_from_body(self._json_body(response))

    async def get(self, collection: str, record_id: str, *, expand: str | None = None) -> dict:
        params = {"expand": expand} if expand else None
        response = await self._send("GET", _records_path(collection, record_id), params=params)
        return self._json_body(response)

    async def create(self, collection: str, data: RecordData) -> dict:
        response = await self._send_record("POST", _records_path(collection), data)
        return self._json_body(response)

    async def update(self, collection: str, record_id: str, data: RecordData) -> dict:
        response = await self._send_record("PATCH", _records_path(collection, record_id), data)
        return self._json_body(response)

    async def delete(self, collection: str, record_id: str) -> None:
        await self._send("DELETE", _records_path(collection, record_id))

    def file_url(self, record: Mapping[str, object], filename: str) -> str:
        if not filename or not record.get("id"):
            return ""
        collection = record.get("collectionId") or record.get("collectionName") or ""
        return "/".join(
            [
                self.base_url,
                "api",
                "files",
                url_quote(str(collection), safe=""),
                url_quote(str(record["id"]), safe=""),
                url_quote(filename, safe=""),
            ]
        )

    async def auth_with_password(
        self,
        email: str,
        password: str,
        *,
        collection: str = "users",
    ) -> AuthResult:
        path = f"/api/collections/{url_quote(collection, safe='')}/auth-with-password"
        response = await self._send(
            "POST",
            path,
            json={"identity": email, "password": password},
        )
        body = self._json_body(response)
        token = str(body.get("token") or "")
        record = body.get("record") if isinstance(body.get("record"), dict) else {}
        self.auth_store.save(token, record)
        logger.info(
            "remote.auth_succeeded",
            extra={"event": "remote.auth_succeeded", "user_id": record.get("id")},
        )
        return AuthResult(token=token, record=record)

    async def health(self) -> bool:
        try:
            await self._send("GET", "/api/health")
        except RemoteError:
            return False
        return True

    async def _send_record(self, method: str, path: str, data: RecordData) -> httpx.Response:
        payload = data if isinstance(data, FormPayload) else FormPayload.from_mapping(dict(data))
        if payload.has_files:
            form_data, files = payload.to_multipart()
            return await self._send(method, path, data=form_data, files=files)
        return await self._send(method, path, json=payload.to_json())

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {}
        if self.auth_store.token:
            headers["Authorization"] = self.auth_store.token
        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(
                "remote.transport_failed",
                extra={"event": "remote.transport_failed", "method": method, "path": path},
            )
            raise RemoteError.from_transport(exc) from exc
        if response.is_error:
            error = RemoteError.from_response(response)
            logger.info(
                "remote.request_failed",
                extra={
                    "event": "remote.request_failed",
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                },
            )
            raise error
        return response

    @staticmethod
    def _json_body(response: httpx.Response) -> dict:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteError("Backend returned a non-JSON response.", status=response.status_code) from exc
        return body if isinstance(body, dict) else {}
