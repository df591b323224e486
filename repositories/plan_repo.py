from __future__ import annotations

from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from schemas.imports import now_epoch
from schemas.plan_schema import PlanCreate, PlanOut


async def create_plan(plan: PlanCreate) -> PlanOut:
    payload = {**plan.model_dump(mode="json"), "createdAt": now_epoch(), "updatedAt": now_epoch()}
    result = await db.plans.insert_one(payload)
    stored = await db.plans.find_one({"_id": result.inserted_id})
    return PlanOut(**stored)


async def get_plan(plan_id: str) -> Optional[PlanOut]:
    if not ObjectId.is_valid(plan_id):
        return None
    row = await db.plans.find_one({"_id": ObjectId(plan_id)})
    if row is None:
        return None
    return PlanOut(**row)


async def get_plan_by_name(display_name: str, *, exclude_id: Optional[str] = None) -> Optional[PlanOut]:
    filter_dict: dict[str, Any] = {"displayName": display_name}
    if exclude_id and ObjectId.is_valid(exclude_id):
        filter_dict["_id"] = {"$ne": ObjectId(exclude_id)}
    row = await db.plans.find_one(filter_dict)
    if row is None:
        return None
    return PlanOut(**row)


async def get_plans(filter_dict: Optional[dict[str, Any]] = None) -> List[PlanOut]:
    cursor = db.plans.find(filter_dict or {}).sort("price", 1)
    return [PlanOut(**doc) async for doc in cursor]


async def update_plan(plan_id: str, changes: dict[str, Any]) -> Optional[PlanOut]:
    if not ObjectId.is_valid(plan_id):
        return None
    row = await db.plans.find_one_and_update(
        {"_id": ObjectId(plan_id)},
        {"$set": {**changes, "updatedAt": now_epoch()}},
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return PlanOut(**row)


async def delete_plan(plan_id: str) -> bool:
    if not ObjectId.is_valid(plan_id):
        return False
    result = await db.plans.delete_one({"_id": ObjectId(plan_id)})
    return bool(result.deleted_count)
