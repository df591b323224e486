from __future__ import annotations

import logging
from typing import List

from pymongo.errors import DuplicateKeyError

from core.errors import conflict, invalid_input, resource_not_found
from repositories.plan_repo import create_plan, delete_plan, get_plan, get_plan_by_name, get_plans, update_plan
from schemas.plan_schema import PlanCreate, PlanOut, PlanUpdate

logger = logging.getLogger(__name__)


async def add_plan(payload: PlanCreate) -> PlanOut:
    if await get_plan_by_name(payload.displayName) is not None:
        raise conflict("Plan with this name already exists")
    try:
        return await create_plan(payload)
    except DuplicateKeyError:
        raise conflict("Plan with this name already exists")


async def retrieve_plans(active_only: bool = False) -> List[PlanOut]:
    return await get_plans({"status": True} if active_only else None)


async def retrieve_plan(plan_id: str) -> PlanOut:
    result = await get_plan(plan_id)
    if result is None:
        raise resource_not_found("Plan", plan_id)
    return result


async def update_plan_by_id(plan_id: str, payload: PlanUpdate) -> PlanOut:
    """
    Raises:
        AppException 400: empty update or price above mrp
        AppException 404: plan not found
        AppException 409: new name used by another plan
    """
    changes = payload.model_dump(mode="json", exclude_none=True)
    if not changes:
        raise invalid_input("At least one field must be provided")

    plan = await retrieve_plan(plan_id)
    if changes.get("price", plan.price) > changes.get("mrp", plan.mrp):
        raise invalid_input("price cannot exceed mrp")
    if "displayName" in changes and await get_plan_by_name(changes["displayName"], exclude_id=plan_id) is not None:
        raise conflict("Plan with this name already exists")

    try:
        updated = await update_plan(plan_id, changes)
    except DuplicateKeyError:
        raise conflict("Plan with this name already exists")
    if updated is None:
        raise resource_not_found("Plan", plan_id)
    return updated


async def remove_plan(plan_id: str) -> None:
    if not await delete_plan(plan_id):
        raise resource_not_found("Plan", plan_id)
    logger.info("plan deleted id=%s", plan_id)
