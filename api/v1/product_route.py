from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from core.response_envelope import document_response
from schemas.product_schema import ProductCreate, ProductUpdate
from security.auth import verify_restaurant_session
from security.principal import RestaurantPrincipal
from services.product_service import (
    add_product,
    remove_product,
    retrieve_product,
    retrieve_products,
    update_product_by_id,
    update_product_image,
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("/")
@document_response(message="Product created successfully", status_code=201)
async def create_product(
    payload: ProductCreate,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await add_product(principal, payload)


@router.get("/restaurant/{restro_id}")
@document_response(message="Products fetched successfully", success_example=[])
async def list_products(
    restro_id: str,
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    active_only: bool = Query(default=True, alias="activeOnly"),
    start: int = Query(default=0, ge=0),
    stop: int = Query(default=100, gt=0, le=500),
):
    return await retrieve_products(
        restro_id,
        category_id=category_id,
        active_only=active_only,
        start=start,
        stop=stop,
    )


@router.get("/{product_id}")
@document_response(message="Product fetched successfully")
async def get_product(product_id: str):
    return await retrieve_product(product_id)


@router.patch("/{product_id}")
@document_response(message="Product updated successfully", response_codes={403: "Owned by another restaurant"})
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await update_product_by_id(principal, product_id, payload)


@router.patch("/{product_id}/image")
@document_response(message="Product image updated successfully", response_codes={413: "Image too large"})
async def upload_product_image(
    product_id: str,
    image: UploadFile = File(...),
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await update_product_image(principal, product_id, image)


@router.delete("/{product_id}")
@document_response(message="Product deleted successfully", response_codes={403: "Owned by another restaurant"})
async def delete_product(
    product_id: str,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    await remove_product(principal, product_id)
    return None
