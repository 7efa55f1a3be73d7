from __future__ import annotations

import logging
from collections.abc import Mapping

from pubshare.remote.client import RecordData, RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.remote.payload import FileUpload, FormPayload
from pubshare.services.results import OperationResult

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
RESEARCHER_TYPES: tuple[str, ...] = ("academic", "corporate", "medical", "non_researcher")
PROFILE_FIELDS: tuple[str, ...] = (
    "name",
    "bio",
    "institution",
    "department",
    "company",
    "position",
    "website",
    "orcid_id",
    "researcher_type",
    "is_scientific",
)


class UserServiceError(ValueError):
    """Raised for expected account-validation failures."""


def validate_signup(user_data: Mapping[str, object]) -> None:
    email = str(user_data.get("email") or "").strip()
    if not email:
        raise UserServiceError("Email is required.")
    password = str(user_data.get("password") or "")
    if not password:
        raise UserServiceError("Password is required.")
    if password != str(user_data.get("passwordConfirm") or ""):
        raise UserServiceError("Passwords do not match")


def profile_payload(values: Mapping[str, object], *, avatar: FileUpload | None = None) -> FormPayload:
    payload = FormPayload()
    for name in PROFILE_FIELDS:
        value = values.get(name)
        if value is None or value == "":
            continue
        payload.append(name, value)
    if avatar is not None:
        payload.append("avatar", avatar)
    return payload


async def login_with_email(client: RemoteCollectionClient, email: str, password: str) -> OperationResult:
    try:
        auth = await client.auth_with_password(email.strip(), password)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(auth)


async def signup_with_email(client: RemoteCollectionClient, user_data: Mapping[str, object]) -> OperationResult:
    try:
        record = await client.create(USERS_COLLECTION, dict(user_data))
        await client.auth_with_password(str(user_data["email"]).strip(), str(user_data["password"]))
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    logger.info(
        "users.signed_up",
        extra={"event": "users.signed_up", "user_id": record.get("id")},
    )
    return OperationResult.ok(record)


def logout(client: RemoteCollectionClient) -> None:
    client.auth_store.clear()


def get_current_user(client: RemoteCollectionClient) -> dict | None:
    return client.auth_store.model


def is_authenticated(client: RemoteCollectionClient) -> bool:
    return client.auth_store.is_valid


async def get_user_by_id(client: RemoteCollectionClient, user_id: str) -> OperationResult:
    try:
        record = await client.get(USERS_COLLECTION, user_id)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(record)


async def update_user_profile(
    client: RemoteCollectionClient,
    user_id: str,
    data: RecordData,
) -> OperationResult:
    try:
        record = await client.update(USERS_COLLECTION, user_id, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    if client.auth_store.model and client.auth_store.model.get("id") == record.get("id"):
        client.auth_store.save(client.auth_store.token, record)
    return OperationResult.ok(record)


def avatar_url(client: RemoteCollectionClient, record: dict) -> str:
    return client.file_url(record, str(record.get("avatar") or ""))
