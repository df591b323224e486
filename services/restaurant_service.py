from __future__ import annotations

import logging

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from core.errors import conflict, invalid_input, resource_not_found
from repositories.restaurant_repo import (
    create_restaurant,
    find_restaurant_conflict,
    get_restaurant_by_id,
    update_restaurant,
)
from schemas.imports import now_epoch
from schemas.restaurant_schema import RestaurantCreate, RestaurantOut, RestaurantRegister, RestaurantUpdate
from services.image_service import store_image

logger = logging.getLogger(__name__)

DUPLICATE_RESTAURANT_MESSAGE = "Restaurant with phone number or username already exists"


async def register_restaurant(payload: RestaurantRegister) -> RestaurantOut:
    """adds a restaurant account

    Raises:
        AppException 409: username or phone number already registered
    """
    existing = await find_restaurant_conflict(username=payload.username, phone_number=payload.phoneNumber)
    if existing is not None:
        raise conflict(DUPLICATE_RESTAURANT_MESSAGE)

    record = await run_in_threadpool(RestaurantCreate, **payload.model_dump())
    try:
        created = await create_restaurant(record)
    except DuplicateKeyError:
        raise conflict(DUPLICATE_RESTAURANT_MESSAGE)

    logger.info("restaurant registered id=%s username=%s", created.id, created.username)
    return created


async def retrieve_restaurant(restaurant_id: str) -> RestaurantOut:
    result = await get_restaurant_by_id(restaurant_id)
    if result is None:
        raise resource_not_found("Restaurant", restaurant_id)
    return result


async def update_restaurant_details(restaurant_id: str, payload: RestaurantUpdate) -> RestaurantOut:
    """
    Raises:
        AppException 400: empty update
        AppException 409: phone number belongs to another restaurant
    """
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise invalid_input("At least one field must be provided")

    if "phoneNumber" in changes:
        existing = await find_restaurant_conflict(phone_number=changes["phoneNumber"], exclude_id=restaurant_id)
        if existing is not None:
            raise conflict(DUPLICATE_RESTAURANT_MESSAGE)

    changes["updatedAt"] = now_epoch()
    try:
        updated = await update_restaurant(restaurant_id, changes)
    except DuplicateKeyError:
        raise conflict(DUPLICATE_RESTAURANT_MESSAGE)
    if updated is None:
        raise resource_not_found("Restaurant", restaurant_id)
    return updated


async def update_restaurant_avatar(restaurant_id: str, upload: UploadFile) -> RestaurantOut:
    stored = await store_image(upload=upload, owner_id=restaurant_id, folder="restaurants")
    updated = await update_restaurant(restaurant_id, {"avatar": stored.url, "updatedAt": now_epoch()})
    if updated is None:
        raise resource_not_found("Restaurant", restaurant_id)
    return updated
