from __future__ import annotations

from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from schemas.imports import now_epoch
from schemas.order_schema import OrderOut, OrderPlace


async def create_order(restro_id: str, order: OrderPlace) -> OrderOut:
    payload = {
        **order.model_dump(),
        "restroId": restro_id,
        "createdAt": now_epoch(),
        "updatedAt": now_epoch(),
    }
    result = await db.orders.insert_one(payload)
    stored = await db.orders.find_one({"_id": result.inserted_id})
    return OrderOut(**stored)


async def get_order(order_id: str) -> Optional[OrderOut]:
    if not ObjectId.is_valid(order_id):
        return None
    row = await db.orders.find_one({"_id": ObjectId(order_id)})
    if row is None:
        return None
    return OrderOut(**row)


async def get_orders(filter_dict: dict[str, Any], start: int = 0, stop: int = 100) -> List[OrderOut]:
    cursor = db.orders.find(filter_dict).sort("createdAt", -1).skip(start).limit(stop - start)
    return [OrderOut(**doc) async for doc in cursor]


async def update_order(order_id: str, changes: dict[str, Any]) -> Optional[OrderOut]:
    if not ObjectId.is_valid(order_id):
        return None
    row = await db.orders.find_one_and_update(
        {"_id": ObjectId(order_id)},
        {"$set": {**changes, "updatedAt": now_epoch()}},
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return OrderOut(**row)


async def delete_order(order_id: str) -> bool:
    if not ObjectId.is_valid(order_id):
        return False
    result = await db.orders.delete_one({"_id": ObjectId(order_id)})
    return bool(result.deleted_count)
