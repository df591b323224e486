from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from core.errors import invalid_input, resource_not_found
from repositories.label_repo import create_label, delete_label, get_label, get_labels, update_label
from schemas.label_schema import LabelCreate, LabelOut, LabelUpdate
from security.account_status_check import ensure_same_restaurant
from security.principal import RestaurantPrincipal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelResource:
    """A restaurant-scoped ``{displayName, status}`` collection."""

    collection: str
    label: str


WORKER_ROLES = LabelResource(collection="worker_roles", label="Worker role")
WORKER_SHIFTS = LabelResource(collection="worker_shifts", label="Worker shift")
PRODUCT_CATEGORIES = LabelResource(collection="product_categories", label="Product category")
ORDER_STATUSES = LabelResource(collection="order_statuses", label="Order status")


async def add_label(resource: LabelResource, principal: RestaurantPrincipal, payload: LabelCreate) -> LabelOut:
    created = await create_label(resource.collection, principal.restro_id, payload)
    logger.info("%s created id=%s restro=%s", resource.collection, created.id, principal.restro_id)
    return created


async def retrieve_labels(resource: LabelResource, restro_id: str, *, active_only: bool = False) -> List[LabelOut]:
    return await get_labels(resource.collection, restro_id, active_only=active_only)


async def retrieve_label(resource: LabelResource, label_id: str) -> LabelOut:
    result = await get_label(resource.collection, label_id)
    if result is None:
        raise resource_not_found(resource.label, label_id)
    return result


async def require_restaurant_label(resource: LabelResource, restro_id: str, label_id: str) -> LabelOut:
    """Fetch a label and make sure it belongs to ``restro_id``; referenced ids that do not are invalid input."""
    result = await get_label(resource.collection, label_id)
    if result is None or result.restroId != restro_id:
        raise invalid_input(f"{resource.label} does not belong to this restaurant", details={"id": label_id})
    return result


async def update_label_by_id(
    resource: LabelResource,
    principal: RestaurantPrincipal,
    label_id: str,
    payload: LabelUpdate,
) -> LabelOut:
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise invalid_input("At least one of the following fields must be provided: displayName, status")

    existing = await retrieve_label(resource, label_id)
    ensure_same_restaurant(principal, existing.restroId, resource=resource.label.lower())

    updated = await update_label(resource.collection, label_id, changes)
    if updated is None:
        raise resource_not_found(resource.label, label_id)
    return updated


async def remove_label(resource: LabelResource, principal: RestaurantPrincipal, label_id: str) -> None:
    existing = await retrieve_label(resource, label_id)
    ensure_same_restaurant(principal, existing.restroId, resource=resource.label.lower())
    if not await delete_label(resource.collection, label_id):
        raise resource_not_found(resource.label, label_id)
    logger.info("%s deleted id=%s", resource.collection, label_id)
