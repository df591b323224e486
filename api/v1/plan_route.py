from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from core.admin_logger import log_what_super_admin_does
from core.response_envelope import document_response
from schemas.plan_schema import PlanCreate, PlanUpdate
from services.plan_service import add_plan, remove_plan, retrieve_plan, retrieve_plans, update_plan_by_id

router = APIRouter(prefix="/plans", tags=["Plans"])


@router.post("/", dependencies=[Depends(log_what_super_admin_does)])
@document_response(message="Plan created successfully", status_code=201, response_codes={409: "Plan name taken"})
async def create_plan(payload: PlanCreate):
    return await add_plan(payload)


@router.get("/")
@document_response(message="Plans fetched successfully", success_example=[])
async def list_plans(active_only: bool = Query(default=False, alias="activeOnly")):
    return await retrieve_plans(active_only=active_only)


@router.get("/{plan_id}")
@document_response(message="Plan fetched successfully")
async def get_plan(plan_id: str):
    return await retrieve_plan(plan_id)


@router.patch("/{plan_id}", dependencies=[Depends(log_what_super_admin_does)])
@document_response(message="Plan updated successfully")
async def update_plan(plan_id: str, payload: PlanUpdate):
    return await update_plan_by_id(plan_id, payload)


@router.delete("/{plan_id}", dependencies=[Depends(log_what_super_admin_does)])
@document_response(message="Plan deleted successfully")
async def delete_plan(plan_id: str):
    await remove_plan(plan_id)
    return None
