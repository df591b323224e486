from __future__ import annotations

from types import SimpleNamespace

import pytest

from core.errors import AppException, ErrorCode
from schemas.label_schema import LabelOut
from schemas.order_schema import OrderCustomerUpdate, OrderItem, OrderOut, OrderPlace, OrderStaffUpdate
from schemas.product_schema import ProductOut
from security.principal import RestaurantPrincipal, WorkerPrincipal
from services import label_service, order_service


def _order(**overrides) -> OrderOut:
    payload = {
        "_id": "order-1",
        "restroId": "restro-1",
        "statusId": "status-new",
        "items": [{"productId": "product-1", "quantity": 2, "price": 120.0}],
        "customerName": "Ravi",
        "customerNumber": "9000011111",
        "tableNumber": 4,
        "totalAmount": 240.0,
    }
    payload.update(overrides)
    return OrderOut(**payload)


def _product(**overrides) -> ProductOut:
    payload = {
        "_id": "product-1",
        "restroId": "restro-1",
        "categoryId": "category-1",
        "displayName": "Paneer Tikka",
        "price": 120.0,
        "status": True,
    }
    payload.update(overrides)
    return ProductOut(**payload)


@pytest.fixture
def catalog(monkeypatch: pytest.MonkeyPatch):
    labels = {
        "status-new": LabelOut(_id="status-new", restroId="restro-1", displayName="New"),
        "status-served": LabelOut(_id="status-served", restroId="restro-1", displayName="Served"),
        "status-foreign": LabelOut(_id="status-foreign", restroId="restro-2", displayName="Other"),
    }
    products = {
        "product-1": _product(),
        "product-2": _product(_id="product-2", displayName="Dal", price=80.0),
        "product-off": _product(_id="product-off", status=False),
        "product-foreign": _product(_id="product-foreign", restroId="restro-2"),
    }
    orders = {"order-1": _order()}
    writes: list[tuple[str, dict]] = []

    async def _get_label(collection: str, label_id: str):
        assert collection == "order_statuses"
        return labels.get(label_id)

    async def _get_product(product_id: str):
        return products.get(product_id)

    async def _get_order(order_id: str):
        return orders.get(order_id)

    async def _update_order(order_id: str, changes: dict):
        writes.append((order_id, changes))
        merged = {**orders[order_id].model_dump(by_alias=True), **changes}
        orders[order_id] = OrderOut(**merged)
        return orders[order_id]

    monkeypatch.setattr(label_service, "get_label", _get_label)
    monkeypatch.setattr(order_service, "get_product", _get_product)
    monkeypatch.setattr(order_service, "get_order", _get_order)
    monkeypatch.setattr(order_service, "update_order", _update_order)
    return SimpleNamespace(orders=orders, writes=writes)


def _place_payload(**overrides) -> OrderPlace:
    payload = {
        "statusId": "status-new",
        "items": [{"productId": "product-1", "quantity": 1, "price": 120.0}],
        "customerName": "Meera",
        "customerNumber": "9000022222",
        "tableNumber": 2,
        "totalAmount": 120.0,
    }
    payload.update(overrides)
    return OrderPlace(**payload)


@pytest.mark.asyncio
async def test_place_order_for_active_restaurant(monkeypatch: pytest.MonkeyPatch, catalog):
    async def _restaurant(restro_id: str):
        return SimpleNamespace(id=restro_id, status=True)

    async def _create_order(restro_id: str, payload: OrderPlace):
        return _order(_id="order-2", restroId=restro_id, customerName=payload.customerName)

    monkeypatch.setattr(order_service, "get_restaurant_by_id", _restaurant)
    monkeypatch.setattr(order_service, "create_order", _create_order)

    created = await order_service.place_order("restro-1", _place_payload())

    assert created.id == "order-2"
    assert created.customerName == "Meera"


@pytest.mark.asyncio
async def test_place_order_for_inactive_restaurant_is_not_found(monkeypatch: pytest.MonkeyPatch, catalog):
    async def _restaurant(restro_id: str):
        return SimpleNamespace(id=restro_id, status=False)

    monkeypatch.setattr(order_service, "get_restaurant_by_id", _restaurant)

    with pytest.raises(AppException) as exc_info:
        await order_service.place_order("restro-1", _place_payload())

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"statusId": "status-foreign"},
        {"items": [{"productId": "product-foreign", "quantity": 1, "price": 1.0}]},
        {"items": [{"productId": "product-off", "quantity": 1, "price": 1.0}]},
        {"items": [{"productId": "missing", "quantity": 1, "price": 1.0}]},
    ],
)
async def test_place_order_rejects_foreign_or_unavailable_references(
    monkeypatch: pytest.MonkeyPatch, catalog, overrides
):
    async def _restaurant(restro_id: str):
        return SimpleNamespace(id=restro_id, status=True)

    async def _create_order(restro_id: str, payload: OrderPlace):
        raise AssertionError("order must not be stored")

    monkeypatch.setattr(order_service, "get_restaurant_by_id", _restaurant)
    monkeypatch.setattr(order_service, "create_order", _create_order)

    with pytest.raises(AppException) as exc_info:
        await order_service.place_order("restro-1", _place_payload(**overrides))

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["code"] == ErrorCode.INVALID_INPUT.value


@pytest.mark.asyncio
async def test_customer_with_matching_identity_can_change_status_and_items(catalog):
    updated = await order_service.update_order_by_customer(
        "order-1",
        OrderCustomerUpdate(
            customerName="Ravi",
            customerNumber="9000011111",
            statusId="status-served",
            items=[OrderItem(productId="product-2", quantity=1, price=80.0)],
            totalAmount=80.0,
        ),
    )

    assert updated.statusId == "status-served"
    assert updated.totalAmount == 80.0
    order_id, changes = catalog.writes[0]
    assert order_id == "order-1"
    assert set(changes) == {"statusId", "items", "totalAmount"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("name", "number"),
    [("Ravi", "9999999999"), ("Someone", "9000011111"), ("Ravi", None)],
)
async def test_customer_identity_mismatch_is_forbidden(catalog, name, number):
    with pytest.raises(AppException) as exc_info:
        await order_service.update_order_by_customer(
            "order-1",
            OrderCustomerUpdate(customerName=name, customerNumber=number, totalAmount=1.0),
        )

    assert exc_info.value.status_code == 403
    assert catalog.writes == []


@pytest.mark.asyncio
async def test_customer_update_with_nothing_to_change_is_invalid(catalog):
    with pytest.raises(AppException) as exc_info:
        await order_service.update_order_by_customer(
            "order-1",
            OrderCustomerUpdate(customerName="Ravi", customerNumber="9000011111"),
        )

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_worker_of_same_restaurant_can_update_order(catalog):
    worker = WorkerPrincipal(_id="worker-1", username="cook1", restroId="restro-1")

    updated = await order_service.update_order_by_staff(worker, "order-1", OrderStaffUpdate(tableNumber=9))

    assert updated.tableNumber == 9


@pytest.mark.asyncio
async def test_staff_of_other_restaurant_cannot_touch_order(catalog):
    outsider = RestaurantPrincipal(_id="restro-2", username="other")

    with pytest.raises(AppException) as exc_info:
        await order_service.update_order_by_staff(outsider, "order-1", OrderStaffUpdate(tableNumber=9))
    with pytest.raises(AppException) as read_exc:
        await order_service.retrieve_order_for_staff(outsider, "order-1")

    assert exc_info.value.status_code == 403
    assert read_exc.value.status_code == 403
    assert catalog.writes == []


@pytest.mark.asyncio
async def test_missing_order_is_not_found(catalog):
    with pytest.raises(AppException) as exc_info:
        await order_service.retrieve_order("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail["details"] == {"resource": "Order", "resource_id": "missing"}
