from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from repositories.principal_repo import SAFE_PROJECTION
from schemas.super_admin_schema import SuperAdminCreate, SuperAdminOut


async def create_super_admin(super_admin: SuperAdminCreate, *, bootstrap: bool = False) -> SuperAdminOut:
    document = super_admin.model_dump()
    if bootstrap:
        # unique sparse index on "bootstrap" lets only one open registration land
        document["bootstrap"] = True
    result = await db.super_admins.insert_one(document)
    stored = await db.super_admins.find_one({"_id": result.inserted_id}, SAFE_PROJECTION)
    return SuperAdminOut(**stored)


async def count_super_admins() -> int:
    return await db.super_admins.count_documents({})


async def get_super_admin(filter_dict: dict[str, Any]) -> Optional[SuperAdminOut]:
    row = await db.super_admins.find_one(filter_dict, SAFE_PROJECTION)
    if row is None:
        return None
    return SuperAdminOut(**row)


async def update_super_admin(super_admin_id: str, changes: dict[str, Any]) -> Optional[SuperAdminOut]:
    if not ObjectId.is_valid(super_admin_id):
        return None
    row = await db.super_admins.find_one_and_update(
        {"_id": ObjectId(super_admin_id)},
        {"$set": changes},
        projection=SAFE_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return SuperAdminOut(**row)
