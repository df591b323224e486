from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from security.kinds import get_kind_config
from security.principal import PrincipalKind

SAFE_PROJECTION = {"password": 0, "refreshToken": 0}
LOGIN_PROJECTION = {"refreshToken": 0}


def _collection(kind: PrincipalKind):
    return db[get_kind_config(kind).collection]


def _object_id(principal_id: str) -> Optional[ObjectId]:
    if isinstance(principal_id, ObjectId):
        return principal_id
    if not ObjectId.is_valid(principal_id):
        return None
    return ObjectId(principal_id)


async def get_principal_by_id(kind: PrincipalKind, principal_id: str) -> Optional[dict[str, Any]]:
    oid = _object_id(principal_id)
    if oid is None:
        return None
    return await _collection(kind).find_one({"_id": oid}, SAFE_PROJECTION)


async def get_principal_for_login(kind: PrincipalKind, field: str, value: str) -> Optional[dict[str, Any]]:
    return await _collection(kind).find_one({field: value}, LOGIN_PROJECTION)


async def get_password_hash(kind: PrincipalKind, principal_id: str) -> Optional[str]:
    oid = _object_id(principal_id)
    if oid is None:
        return None
    document = await _collection(kind).find_one({"_id": oid}, {"password": 1})
    if document is None:
        return None
    return document.get("password")


async def set_refresh_token(kind: PrincipalKind, principal_id: str, refresh_token: str) -> bool:
    result = await _collection(kind).update_one(
        {"_id": _object_id(principal_id)},
        {"$set": {"refreshToken": refresh_token}},
    )
    return result.matched_count == 1


async def rotate_refresh_token(
    kind: PrincipalKind,
    principal_id: str,
    *,
    presented: str,
    replacement: str,
) -> Optional[dict[str, Any]]:
    """Swap ``presented`` for ``replacement`` in one conditional update.

    Returns the updated record (safe projection) or ``None`` when the stored
    token is no longer ``presented``.
    """
    oid = _object_id(principal_id)
    if oid is None:
        return None
    return await _collection(kind).find_one_and_update(
        {"_id": oid, "refreshToken": presented},
        {"$set": {"refreshToken": replacement}},
        projection=SAFE_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )


async def clear_refresh_token(kind: PrincipalKind, principal_id: str) -> None:
    await _collection(kind).update_one(
        {"_id": _object_id(principal_id)},
        {"$unset": {"refreshToken": ""}},
    )


async def update_password(kind: PrincipalKind, principal_id: str, hashed_password: str, *, updated_at: int) -> bool:
    result = await _collection(kind).update_one(
        {"_id": _object_id(principal_id)},
        {
            "$set": {"password": hashed_password, "updatedAt": updated_at},
            "$unset": {"refreshToken": ""},
        },
    )
    return result.matched_count == 1
