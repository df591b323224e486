from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import db
from repositories.principal_repo import SAFE_PROJECTION
from schemas.restaurant_schema import RestaurantCreate, RestaurantOut


async def create_restaurant(restaurant: RestaurantCreate) -> RestaurantOut:
    result = await db.restaurants.insert_one(restaurant.model_dump())
    stored = await db.restaurants.find_one({"_id": result.inserted_id}, SAFE_PROJECTION)
    return RestaurantOut(**stored)


async def find_restaurant_conflict(
    *,
    username: Optional[str] = None,
    phone_number: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> Optional[RestaurantOut]:
    clauses = []
    if username:
        clauses.append({"username": username})
    if phone_number:
        clauses.append({"phoneNumber": phone_number})
    if not clauses:
        return None

    filter_dict: dict[str, Any] = {"$or": clauses}
    if exclude_id and ObjectId.is_valid(exclude_id):
        filter_dict["_id"] = {"$ne": ObjectId(exclude_id)}
    row = await db.restaurants.find_one(filter_dict, SAFE_PROJECTION)
    if row is None:
        return None
    return RestaurantOut(**row)


async def get_restaurant_by_id(restaurant_id: str) -> Optional[RestaurantOut]:
    if not ObjectId.is_valid(restaurant_id):
        return None
    row = await db.restaurants.find_one({"_id": ObjectId(restaurant_id)}, SAFE_PROJECTION)
    if row is None:
        return None
    return RestaurantOut(**row)


async def update_restaurant(restaurant_id: str, changes: dict[str, Any]) -> Optional[RestaurantOut]:
    if not ObjectId.is_valid(restaurant_id):
        return None
    row = await db.restaurants.find_one_and_update(
        {"_id": ObjectId(restaurant_id)},
        {"$set": changes},
        projection=SAFE_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return RestaurantOut(**row)
