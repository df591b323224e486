from __future__ import annotations

import logging
from typing import List, Optional

from core.errors import auth_permission_denied, invalid_input, resource_not_found
from repositories.order_repo import create_order, delete_order, get_order, get_orders, update_order
from repositories.product_repo import get_product
from repositories.restaurant_repo import get_restaurant_by_id
from schemas.order_schema import OrderCustomerUpdate, OrderItem, OrderOut, OrderPlace, OrderStaffUpdate
from security.account_status_check import ensure_same_restaurant
from security.principal import StaffPrincipal
from services.label_service import ORDER_STATUSES, require_restaurant_label

logger = logging.getLogger(__name__)

CUSTOMER_EDITABLE_FIELDS = ("statusId", "items", "totalAmount")


async def _check_items(restro_id: str, items: List[OrderItem]) -> None:
    for item in items:
        product = await get_product(item.productId)
        if product is None or product.restroId != restro_id:
            raise invalid_input("Ordered product does not belong to this restaurant", details={"productId": item.productId})
        if not product.status:
            raise invalid_input("Ordered product is not available", details={"productId": item.productId})


async def place_order(restro_id: str, payload: OrderPlace) -> OrderOut:
    """places an order for a restaurant; no session required

    Raises:
        AppException 404: restaurant not found or inactive
        AppException 400: status or product does not belong to the restaurant
    """
    restaurant = await get_restaurant_by_id(restro_id)
    if restaurant is None or not restaurant.status:
        raise resource_not_found("Restaurant", restro_id)

    await require_restaurant_label(ORDER_STATUSES, restro_id, payload.statusId)
    await _check_items(restro_id, payload.items)

    created = await create_order(restro_id, payload)
    logger.info("order placed id=%s restro=%s", created.id, restro_id)
    return created


async def retrieve_order(order_id: str) -> OrderOut:
    result = await get_order(order_id)
    if result is None:
        raise resource_not_found("Order", order_id)
    return result


async def retrieve_order_for_staff(principal: StaffPrincipal, order_id: str) -> OrderOut:
    order = await retrieve_order(order_id)
    ensure_same_restaurant(principal, order.restroId, resource="order")
    return order


async def retrieve_orders(
    principal: StaffPrincipal,
    *,
    status_id: Optional[str] = None,
    start: int = 0,
    stop: int = 100,
) -> List[OrderOut]:
    filter_dict: dict = {"restroId": principal.restro_id}
    if status_id:
        filter_dict["statusId"] = status_id
    return await get_orders(filter_dict, start=start, stop=stop)


async def _validated_changes(restro_id: str, changes: dict) -> dict:
    if "statusId" in changes:
        await require_restaurant_label(ORDER_STATUSES, restro_id, changes["statusId"])
    if "items" in changes:
        await _check_items(restro_id, [OrderItem(**item) for item in changes["items"]])
    return changes


async def update_order_by_staff(principal: StaffPrincipal, order_id: str, payload: OrderStaffUpdate) -> OrderOut:
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise invalid_input(
            "At least one of the following fields must be provided: statusId, items, customerName, "
            "customerNumber, tableNumber, totalAmount"
        )

    await retrieve_order_for_staff(principal, order_id)
    await _validated_changes(principal.restro_id, changes)

    updated = await update_order(order_id, changes)
    if updated is None:
        raise resource_not_found("Order", order_id)
    return updated


async def update_order_by_customer(order_id: str, payload: OrderCustomerUpdate) -> OrderOut:
    """Lets the customer who placed an order change its status, items or total.

    Raises:
        AppException 403: customerName and customerNumber do not match the order
        AppException 400: nothing to update
    """
    order = await retrieve_order(order_id)
    if order.customerName != payload.customerName or order.customerNumber != payload.customerNumber:
        raise auth_permission_denied(message="Order does not belong to this customer")

    changes = payload.model_dump(include=set(CUSTOMER_EDITABLE_FIELDS), exclude_none=True)
    if not changes:
        raise invalid_input("At least one of the following fields must be provided: statusId, items, totalAmount")

    await _validated_changes(order.restroId, changes)
    updated = await update_order(order_id, changes)
    if updated is None:
        raise resource_not_found("Order", order_id)
    return updated


async def remove_order(principal: StaffPrincipal, order_id: str) -> None:
    await retrieve_order_for_staff(principal, order_id)
    if not await delete_order(order_id):
        raise resource_not_found("Order", order_id)
    logger.info("order deleted id=%s", order_id)
