from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.response_envelope import document_response
from schemas.order_schema import OrderCustomerUpdate, OrderPlace, OrderStaffUpdate
from security.auth import verify_staff_session
from security.principal import StaffPrincipal
from services.order_service import (
    place_order,
    remove_order,
    retrieve_order_for_staff,
    retrieve_orders,
    update_order_by_customer,
    update_order_by_staff,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/{restro_id}")
@document_response(message="Your order was placed successfully", status_code=201)
async def create_order(restro_id: str, payload: OrderPlace):
    return await place_order(restro_id, payload)


@router.get("/")
@document_response(message="List of orders fetched successfully", success_example=[])
async def list_orders(
    status_id: Optional[str] = Query(default=None, alias="statusId"),
    start: int = Query(default=0, ge=0),
    stop: int = Query(default=100, gt=0, le=500),
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    return await retrieve_orders(principal, status_id=status_id, start=start, stop=stop)


@router.get("/{order_id}")
@document_response(message="Order data fetched successfully")
async def get_order(
    order_id: str,
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    return await retrieve_order_for_staff(principal, order_id)


@router.patch("/{order_id}")
@document_response(message="Order data has been updated successfully")
async def update_order(
    order_id: str,
    payload: OrderStaffUpdate,
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    return await update_order_by_staff(principal, order_id, payload)


@router.patch("/{order_id}/customer")
@document_response(
    message="Order data has been updated successfully",
    response_codes={403: "Customer details do not match the order"},
)
async def update_order_as_customer(order_id: str, payload: OrderCustomerUpdate):
    return await update_order_by_customer(order_id, payload)


@router.delete("/{order_id}")
@document_response(message="Order has been deleted successfully")
async def delete_order(
    order_id: str,
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    await remove_order(principal, order_id)
    return None
