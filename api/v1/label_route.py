from __future__ import annotations

from fastapi import APIRouter, Depends

from core.response_envelope import document_response
from schemas.label_schema import LabelCreate, LabelUpdate
from security.auth import verify_restaurant_session, verify_staff_session
from security.principal import RestaurantPrincipal, StaffPrincipal
from services.label_service import (
    ORDER_STATUSES,
    PRODUCT_CATEGORIES,
    WORKER_ROLES,
    WORKER_SHIFTS,
    LabelResource,
    add_label,
    remove_label,
    retrieve_label,
    retrieve_labels,
    update_label_by_id,
)


def build_label_router(resource: LabelResource, *, prefix: str, tag: str) -> APIRouter:
    """CRUD router for one restaurant-scoped label collection."""
    router = APIRouter(prefix=prefix, tags=[tag])
    noun = resource.label

    @router.post("/")
    @document_response(message=f"{noun} created successfully", status_code=201)
    async def create(
        payload: LabelCreate,
        principal: RestaurantPrincipal = Depends(verify_restaurant_session),
    ):
        return await add_label(resource, principal, payload)

    @router.get("/")
    @document_response(message=f"{noun} list fetched successfully", success_example=[])
    async def list_own(principal: StaffPrincipal = Depends(verify_staff_session)):
        return await retrieve_labels(resource, principal.restro_id)

    @router.get("/restaurant/{restro_id}")
    @document_response(message=f"{noun} list fetched successfully", success_example=[])
    async def list_for_restaurant(restro_id: str):
        return await retrieve_labels(resource, restro_id, active_only=True)

    @router.get("/{label_id}")
    @document_response(message=f"{noun} fetched successfully")
    async def get_one(label_id: str):
        return await retrieve_label(resource, label_id)

    @router.patch("/{label_id}")
    @document_response(message=f"{noun} updated successfully", response_codes={403: "Owned by another restaurant"})
    async def update(
        label_id: str,
        payload: LabelUpdate,
        principal: RestaurantPrincipal = Depends(verify_restaurant_session),
    ):
        return await update_label_by_id(resource, principal, label_id, payload)

    @router.delete("/{label_id}")
    @document_response(message=f"{noun} deleted successfully", response_codes={403: "Owned by another restaurant"})
    async def delete(
        label_id: str,
        principal: RestaurantPrincipal = Depends(verify_restaurant_session),
    ):
        await remove_label(resource, principal, label_id)
        return None

    return router


worker_role_router = build_label_router(WORKER_ROLES, prefix="/worker-roles", tag="Worker Roles")
worker_shift_router = build_label_router(WORKER_SHIFTS, prefix="/worker-shifts", tag="Worker Shifts")
product_category_router = build_label_router(PRODUCT_CATEGORIES, prefix="/product-categories", tag="Product Categories")
order_status_router = build_label_router(ORDER_STATUSES, prefix="/order-statuses", tag="Order Statuses")
