from __future__ import annotations

from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from repositories.principal_repo import SAFE_PROJECTION
from schemas.worker_schema import WorkerCreate, WorkerOut, WorkerProfileOut


async def create_worker(worker: WorkerCreate) -> WorkerOut:
    result = await db.workers.insert_one(worker.model_dump())
    stored = await db.workers.find_one({"_id": result.inserted_id}, SAFE_PROJECTION)
    return WorkerOut(**stored)


async def find_worker_conflict(
    *,
    username: Optional[str] = None,
    phone_number: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> Optional[WorkerOut]:
    clauses: list[dict[str, Any]] = []
    if username:
        clauses.append({"username": username})
    if phone_number:
        clauses.append({"phoneNumber": phone_number})
    if not clauses:
        return None
    query: dict[str, Any] = {"$or": clauses}
    if exclude_id is not None and ObjectId.is_valid(exclude_id):
        query["_id"] = {"$ne": ObjectId(exclude_id)}
    row = await db.workers.find_one(query, SAFE_PROJECTION)
    if row is None:
        return None
    return WorkerOut(**row)


async def get_worker_by_id(worker_id: str) -> Optional[WorkerOut]:
    if not ObjectId.is_valid(worker_id):
        return None
    row = await db.workers.find_one({"_id": ObjectId(worker_id)}, SAFE_PROJECTION)
    if row is None:
        return None
    return WorkerOut(**row)


async def get_workers(filter_dict: dict[str, Any], start: int = 0, stop: int = 100) -> List[WorkerOut]:
    cursor = (
        db.workers.find(filter_dict, SAFE_PROJECTION)
        .sort("createdAt", -1)
        .skip(start)
        .limit(stop - start)
    )
    return [WorkerOut(**doc) async for doc in cursor]


async def update_worker(worker_id: str, changes: dict[str, Any]) -> Optional[WorkerOut]:
    if not ObjectId.is_valid(worker_id):
        return None
    row = await db.workers.find_one_and_update(
        {"_id": ObjectId(worker_id)},
        {"$set": changes},
        projection=SAFE_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return WorkerOut(**row)


async def set_logged_in(worker_id: str, logged_in: bool) -> None:
    if not ObjectId.is_valid(worker_id):
        return
    await db.workers.update_one({"_id": ObjectId(worker_id)}, {"$set": {"isLoggedIn": logged_in}})


async def delete_worker(worker_id: str) -> bool:
    if not ObjectId.is_valid(worker_id):
        return False
    result = await db.workers.delete_one({"_id": ObjectId(worker_id)})
    return bool(result.deleted_count)


def _lookup_display_name(collection: str, local_field: str, as_field: str) -> list[dict[str, Any]]:
    # references are stored as hex strings
    return [
        {
            "$lookup": {
                "from": collection,
                "let": {"ref": local_field},
                "pipeline": [
                    {"$match": {"$expr": {"$eq": [{"$toString": "$_id"}, "$$ref"]}}},
                    {"$project": {"_id": 0, "displayName": 1}},
                ],
                "as": as_field,
            }
        },
        {"$set": {as_field: {"$first": f"${as_field}.displayName"}}},
    ]


async def get_worker_profile(username: str) -> Optional[WorkerProfileOut]:
    pipeline: list[dict[str, Any]] = [
        {"$match": {"username": username}},
        {"$project": SAFE_PROJECTION},
        *_lookup_display_name("restaurants", "$restroId", "restaurantName"),
        *_lookup_display_name("worker_shifts", "$shiftId", "shiftName"),
        *_lookup_display_name("worker_roles", "$roleId", "roleName"),
        {"$limit": 1},
    ]
    cursor = await db.workers.aggregate(pipeline)
    rows = await cursor.to_list()
    if not rows:
        return None
    return WorkerProfileOut(**rows[0])
