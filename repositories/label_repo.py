from __future__ import annotations

from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from schemas.imports import now_epoch
from schemas.label_schema import LabelCreate, LabelOut


async def create_label(collection: str, restro_id: str, label: LabelCreate) -> LabelOut:
    payload = {
        **label.model_dump(),
        "restroId": restro_id,
        "createdAt": now_epoch(),
        "updatedAt": now_epoch(),
    }
    result = await db[collection].insert_one(payload)
    stored = await db[collection].find_one({"_id": result.inserted_id})
    return LabelOut(**stored)


async def get_label(collection: str, label_id: str) -> Optional[LabelOut]:
    if not ObjectId.is_valid(label_id):
        return None
    row = await db[collection].find_one({"_id": ObjectId(label_id)})
    if row is None:
        return None
    return LabelOut(**row)


async def get_labels(collection: str, restro_id: str, *, active_only: bool = False) -> List[LabelOut]:
    filter_dict: dict[str, Any] = {"restroId": restro_id}
    if active_only:
        filter_dict["status"] = True
    cursor = db[collection].find(filter_dict).sort("displayName", 1)
    return [LabelOut(**doc) async for doc in cursor]


async def update_label(collection: str, label_id: str, changes: dict[str, Any]) -> Optional[LabelOut]:
    if not ObjectId.is_valid(label_id):
        return None
    row = await db[collection].find_one_and_update(
        {"_id": ObjectId(label_id)},
        {"$set": {**changes, "updatedAt": now_epoch()}},
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return LabelOut(**row)


async def delete_label(collection: str, label_id: str) -> bool:
    if not ObjectId.is_valid(label_id):
        return False
    result = await db[collection].delete_one({"_id": ObjectId(label_id)})
    return bool(result.deleted_count)
