from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Query, Request, Response, UploadFile

from core.response_envelope import document_response
from schemas.session_schema import ChangePasswordRequest, LoginRequest, RefreshRequest, SetPasswordRequest
from schemas.worker_schema import WorkerInsert, WorkerSelfUpdate, WorkerUpdate
from security.auth import verify_restaurant_session, verify_staff_session, verify_worker_session
from security.cookies import extract_refresh_token
from security.principal import PrincipalKind, RestaurantPrincipal, StaffPrincipal, WorkerPrincipal
from services import session_service
from services.worker_service import (
    add_worker,
    login_worker,
    logout_worker,
    remove_worker,
    retrieve_worker,
    retrieve_worker_for_staff,
    retrieve_worker_profile,
    retrieve_workers,
    set_worker_password_by_restaurant,
    update_worker_avatar,
    update_worker_by_restaurant,
    update_worker_self,
)

router = APIRouter(prefix="/workers", tags=["Workers"])


@router.post("/")
@document_response(
    message="Worker added successfully",
    status_code=201,
    response_codes={409: "Worker with username or phone number already exists"},
)
async def insert_worker(
    payload: WorkerInsert,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await add_worker(principal, payload)


@router.get("/")
@document_response(message="Workers fetched successfully", success_example=[])
async def list_workers(
    start: int = Query(default=0, ge=0),
    stop: int = Query(default=100, gt=0, le=500),
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await retrieve_workers(principal.restro_id, start=start, stop=stop)


@router.post("/login")
@document_response(message="Login successful", response_codes={401: "Invalid credentials"})
async def login(payload: LoginRequest, response: Response):
    return await login_worker(payload, response)


@router.post("/refresh-token")
@document_response(message="Access token refreshed", response_codes={401: "Invalid refresh token"})
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = Body(default=None),
):
    presented = extract_refresh_token(request, payload.refreshToken if payload else None)
    return await session_service.refresh(PrincipalKind.WORKER, presented, response)


@router.post("/logout")
@document_response(message="Logged out successfully")
async def logout(
    response: Response,
    principal: WorkerPrincipal = Depends(verify_worker_session),
):
    await logout_worker(principal, response)
    return None


@router.get("/me")
@document_response(message="Worker fetched successfully")
async def get_me(principal: WorkerPrincipal = Depends(verify_worker_session)):
    return await retrieve_worker(principal.id)


@router.patch("/me")
@document_response(message="Worker details updated successfully")
async def update_me(
    payload: WorkerSelfUpdate,
    principal: WorkerPrincipal = Depends(verify_worker_session),
):
    return await update_worker_self(principal, payload)


@router.patch("/avatar")
@document_response(message="Avatar updated successfully", response_codes={413: "Image too large"})
async def update_avatar(
    avatar: UploadFile = File(...),
    principal: WorkerPrincipal = Depends(verify_worker_session),
):
    return await update_worker_avatar(principal, avatar)


@router.patch("/change-password")
@document_response(message="Password changed successfully", response_codes={400: "Invalid old password"})
async def change_password(
    payload: ChangePasswordRequest,
    principal: WorkerPrincipal = Depends(verify_worker_session),
):
    await session_service.change_password(PrincipalKind.WORKER, principal.id, payload)
    return None


@router.get("/profile/{username}")
@document_response(message="Worker profile fetched successfully", response_codes={403: "Worker belongs to another restaurant"})
async def get_profile(
    username: str,
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    return await retrieve_worker_profile(principal, username)


@router.get("/{worker_id}")
@document_response(message="Worker fetched successfully", response_codes={403: "Worker belongs to another restaurant"})
async def get_worker(
    worker_id: str,
    principal: StaffPrincipal = Depends(verify_staff_session),
):
    return await retrieve_worker_for_staff(principal, worker_id)


@router.patch("/{worker_id}")
@document_response(message="Worker updated successfully", response_codes={403: "Worker belongs to another restaurant"})
async def update_worker(
    worker_id: str,
    payload: WorkerUpdate,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await update_worker_by_restaurant(principal, worker_id, payload)


@router.patch("/{worker_id}/password")
@document_response(message="Worker password changed successfully")
async def set_worker_password(
    worker_id: str,
    payload: SetPasswordRequest,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    await set_worker_password_by_restaurant(principal, worker_id, payload.newPassword)
    return None


@router.delete("/{worker_id}")
@document_response(message="Worker deleted successfully", response_codes={403: "Worker belongs to another restaurant"})
async def delete_worker(
    worker_id: str,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    await remove_worker(principal, worker_id)
    return None
