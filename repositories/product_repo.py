from __future__ import annotations

from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from schemas.imports import now_epoch
from schemas.product_schema import ProductCreate, ProductOut


async def create_product(restro_id: str, product: ProductCreate) -> ProductOut:
    payload = {
        **product.model_dump(),
        "restroId": restro_id,
        "avatar": None,
        "createdAt": now_epoch(),
        "updatedAt": now_epoch(),
    }
    result = await db.products.insert_one(payload)
    stored = await db.products.find_one({"_id": result.inserted_id})
    return ProductOut(**stored)


async def get_product(product_id: str) -> Optional[ProductOut]:
    if not ObjectId.is_valid(product_id):
        return None
    row = await db.products.find_one({"_id": ObjectId(product_id)})
    if row is None:
        return None
    return ProductOut(**row)


async def get_products(filter_dict: dict[str, Any], start: int = 0, stop: int = 100) -> List[ProductOut]:
    cursor = db.products.find(filter_dict).sort("displayName", 1).skip(start).limit(stop - start)
    return [ProductOut(**doc) async for doc in cursor]


async def update_product(product_id: str, changes: dict[str, Any]) -> Optional[ProductOut]:
    if not ObjectId.is_valid(product_id):
        return None
    row = await db.products.find_one_and_update(
        {"_id": ObjectId(product_id)},
        {"$set": {**changes, "updatedAt": now_epoch()}},
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return ProductOut(**row)


async def delete_product(product_id: str) -> bool:
    if not ObjectId.is_valid(product_id):
        return False
    result = await db.products.delete_one({"_id": ObjectId(product_id)})
    return bool(result.deleted_count)
