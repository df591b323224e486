from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import UploadFile

from core.errors import invalid_input, resource_not_found
from repositories.product_repo import create_product, delete_product, get_product, get_products, update_product
from schemas.product_schema import ProductCreate, ProductOut, ProductUpdate
from security.account_status_check import ensure_same_restaurant
from security.principal import RestaurantPrincipal
from services.image_service import store_image
from services.label_service import PRODUCT_CATEGORIES, require_restaurant_label

logger = logging.getLogger(__name__)


async def add_product(principal: RestaurantPrincipal, payload: ProductCreate) -> ProductOut:
    await require_restaurant_label(PRODUCT_CATEGORIES, principal.restro_id, payload.categoryId)
    created = await create_product(principal.restro_id, payload)
    logger.info("product created id=%s restro=%s", created.id, principal.restro_id)
    return created


async def retrieve_products(
    restro_id: str,
    *,
    category_id: Optional[str] = None,
    active_only: bool = False,
    start: int = 0,
    stop: int = 100,
) -> List[ProductOut]:
    filter_dict: dict = {"restroId": restro_id}
    if category_id:
        filter_dict["categoryId"] = category_id
    if active_only:
        filter_dict["status"] = True
    return await get_products(filter_dict, start=start, stop=stop)


async def retrieve_product(product_id: str) -> ProductOut:
    result = await get_product(product_id)
    if result is None:
        raise resource_not_found("Product", product_id)
    return result


async def _owned_product(principal: RestaurantPrincipal, product_id: str) -> ProductOut:
    product = await retrieve_product(product_id)
    ensure_same_restaurant(principal, product.restroId, resource="product")
    return product


async def update_product_by_id(principal: RestaurantPrincipal, product_id: str, payload: ProductUpdate) -> ProductOut:
    """
    Raises:
        AppException 400: empty update, new category not owned, or price above mrp
        AppException 403: product belongs to another restaurant
        AppException 404: product not found
    """
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise invalid_input("At least one field must be provided")

    product = await _owned_product(principal, product_id)
    if "categoryId" in changes:
        await require_restaurant_label(PRODUCT_CATEGORIES, principal.restro_id, changes["categoryId"])

    price = changes.get("price", product.price)
    mrp = changes.get("mrp", product.mrp)
    if mrp is not None and price > mrp:
        raise invalid_input("price cannot exceed mrp")

    updated = await update_product(product_id, changes)
    if updated is None:
        raise resource_not_found("Product", product_id)
    return updated


async def update_product_image(principal: RestaurantPrincipal, product_id: str, upload: UploadFile) -> ProductOut:
    await _owned_product(principal, product_id)
    stored = await store_image(upload=upload, owner_id=principal.restro_id, folder="products")
    updated = await update_product(product_id, {"avatar": stored.url})
    if updated is None:
        raise resource_not_found("Product", product_id)
    return updated


async def remove_product(principal: RestaurantPrincipal, product_id: str) -> None:
    await _owned_product(principal, product_id)
    if not await delete_product(product_id):
        raise resource_not_found("Product", product_id)
    logger.info("product deleted id=%s", product_id)
