from __future__ import annotations

import asyncio
import base64
import copy
import itertools
import json
import time

from pubshare.remote.auth_store import AuthStore
from pubshare.remote.client import AuthResult, RecordPage
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Expression
from pubshare.remote.payload import FileUpload, FormPayload

MUTATION_METHODS = {"create", "update", "delete"}


def make_token(*, exp: float | None = None, subject: str = "user-1") -> str:
    def _segment(value: dict) -> str:
        raw = json.dumps(value).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    claims = {"id": subject, "exp": exp if exp is not None else time.time() + 3600}
    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(claims)}.signature"


def _record_values(data) -> dict:
    payload = data if isinstance(data, FormPayload) else FormPayload.from_mapping(dict(data))
    values: dict[str, object] = {}
    for name in payload.names():
        items = [item.filename if isinstance(item, FileUpload) else item for item in payload.get_all(name)]
        values[name] = items[0] if len(items) == 1 and name != "preview_img" else items
    return values


class _Store:
    def __init__(self) -> None:
        self.records: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple[str, str, str | None, dict | None]] = []
        self.failures: dict[tuple[str, str, str | None], RemoteError] = {}
        self.ids = itertools.count(1)


class InMemoryCollectionClient:
    """Stand-in for ``RemoteCollectionClient`` that keeps records in memory.

    Every call is recorded in ``calls`` as ``(method, collection, record_id, data)``
    and yields to the event loop once, so concurrent callers interleave.
    """

    base_url = "http://backend.test"

    def __init__(self, *, auth_store: AuthStore | None = None, _store: _Store | None = None) -> None:
        self._store = _store or _Store()
        self.auth_store = auth_store if auth_store is not None else AuthStore()

    @property
    def records(self) -> dict[str, dict[str, dict]]:
        return self._store.records

    @property
    def calls(self) -> list[tuple[str, str, str | None, dict | None]]:
        return self._store.calls

    def mutation_calls(self) -> list[tuple[str, str, str | None, dict | None]]:
        return [call for call in self.calls if call[0] in MUTATION_METHODS]

    def with_auth_store(self, auth_store: AuthStore) -> InMemoryCollectionClient:
        return InMemoryCollectionClient(auth_store=auth_store, _store=self._store)

    def seed(self, collection: str, record: dict) -> dict:
        stored = dict(record)
        stored.setdefault("id", f"{collection[:3]}{next(self._store.ids)}")
        stored.setdefault("collectionName", collection)
        stored.setdefault("created", f"{next(self._store.ids):06d}")
        self._store.records.setdefault(collection, {})[stored["id"]] = stored
        return stored

    def fail_on(
        self,
        method: str,
        collection: str,
        record_id: str | None = None,
        *,
        message: str = "Something went wrong.",
        status: int = 400,
        data: dict | None = None,
    ) -> None:
        self._store.failures[(method, collection, record_id)] = RemoteError(message, status=status, data=data)

    def _maybe_fail(self, method: str, collection: str, record_id: str | None) -> None:
        error = self._store.failures.get((method, collection, record_id))
        if error is None:
            error = self._store.failures.get((method, collection, None))
        if error is not None:
            raise error

    def _record(self, method: str, collection: str, record_id: str | None, data: dict | None) -> None:
        self._store.calls.append((method, collection, record_id, data))

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
        await asyncio.sleep(0)
        self._record("list", collection, None, {"page": page, "per_page": per_page, "sort": sort, "filter": filter})
        self._maybe_fail("list", collection, None)
        records = list(self._store.records.get(collection, {}).values())
        if isinstance(filter, Expression):
            records = [record for record in records if filter.matches(record)]
        if sort:
            key = sort.lstrip("-")
            records.sort(key=lambda record: (record.get(key) is None, record.get(key) or 0), reverse=sort.startswith("-"))
        start = (page - 1) * per_page
        window = records[start : start + per_page]
        return RecordPage(
            items=[copy.deepcopy(record) for record in window],
            page=page,
            per_page=per_page,
            total_items=len(records),
            total_pages=(len(records) + per_page - 1) // per_page if per_page else 0,
        )

    async def get(self, collection: str, record_id: str, *, expand: str | None = None) -> dict:
        await asyncio.sleep(0)
        self._record("get", collection, record_id, None)
        self._maybe_fail("get", collection, record_id)
        record = self._store.records.get(collection, {}).get(record_id)
        if record is None:
            raise RemoteError("The requested resource wasn't found.", status=404)
        return copy.deepcopy(record)

    async def create(self, collection: str, data) -> dict:
        await asyncio.sleep(0)
        values = _record_values(data)
        self._record("create", collection, None, values)
        self._maybe_fail("create", collection, None)
        return copy.deepcopy(self.seed(collection, values))

    async def update(self, collection: str, record_id: str, data) -> dict:
        await asyncio.sleep(0)
        values = _record_values(data)
        self._record("update", collection, record_id, values)
        self._maybe_fail("update", collection, record_id)
        record = self._store.records.get(collection, {}).get(record_id)
        if record is None:
            raise RemoteError("The requested resource wasn't found.", status=404)
        record.update(values)
        return copy.deepcopy(record)

    async def delete(self, collection: str, record_id: str) -> None:
        await asyncio.sleep(0)
        self._record("delete", collection, record_id, None)
        self._maybe_fail("delete", collection, record_id)
        if self._store.records.get(collection, {}).pop(record_id, None) is None:
            raise RemoteError("The requested resource wasn't found.", status=404)

    def file_url(self, record: dict, filename: str) -> str:
        if not filename or not record.get("id"):
            return ""
        collection = record.get("collectionId") or record.get("collectionName") or ""
        return f"{self.base_url}/api/files/{collection}/{record['id']}/{filename}"

    async def auth_with_password(self, email: str, password: str, *, collection: str = "users") -> AuthResult:
        await asyncio.sleep(0)
        self._record("auth", collection, None, {"identity": email})
        for record in self._store.records.get(collection, {}).values():
            if record.get("email") == email and record.get("password") == password:
                token = make_token(subject=record["id"])
                user = {key: value for key, value in record.items() if key not in {"password", "passwordConfirm"}}
                self.auth_store.save(token, user)
                return AuthResult(token=token, record=user)
        raise RemoteError("Failed to authenticate.", status=400)

    async def health(self) -> bool:
        return True
