from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response

from core.response_envelope import document_response
from schemas.session_schema import ChangePasswordRequest, LoginRequest, RefreshRequest
from schemas.super_admin_schema import SuperAdminRegister, SuperAdminUpdate
from security.auth import optional_super_admin_session, verify_super_admin_session
from security.cookies import extract_refresh_token
from security.principal import PrincipalKind, SuperAdminPrincipal
from services import session_service
from services.super_admin_service import (
    register_super_admin,
    retrieve_super_admin,
    update_super_admin_details,
)

router = APIRouter(prefix="/super-admins", tags=["Super Admins"])


@router.post("/register")
@document_response(
    message="Super admin registered successfully",
    status_code=201,
    response_codes={403: "A super admin already exists", 409: "Username already exists"},
)
async def register(
    payload: SuperAdminRegister,
    actor: Optional[SuperAdminPrincipal] = Depends(optional_super_admin_session),
):
    return await register_super_admin(payload, actor=actor)


@router.post("/login")
@document_response(message="Login successful", response_codes={401: "Invalid credentials"})
async def login(payload: LoginRequest, response: Response):
    return await session_service.login(PrincipalKind.SUPER_ADMIN, payload, response)


@router.post("/refresh-token")
@document_response(message="Access token refreshed", response_codes={401: "Invalid refresh token"})
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = Body(default=None),
):
    presented = extract_refresh_token(request, payload.refreshToken if payload else None)
    return await session_service.refresh(PrincipalKind.SUPER_ADMIN, presented, response)


@router.post("/logout")
@document_response(message="Logged out successfully")
async def logout(
    response: Response,
    principal: SuperAdminPrincipal = Depends(verify_super_admin_session),
):
    await session_service.logout(PrincipalKind.SUPER_ADMIN, principal, response)
    return None


@router.get("/me")
@document_response(message="Super admin fetched successfully")
async def get_me(principal: SuperAdminPrincipal = Depends(verify_super_admin_session)):
    return await retrieve_super_admin(principal.id)


@router.patch("/me")
@document_response(message="Super admin details updated successfully", response_codes={409: "Username already exists"})
async def update_me(
    payload: SuperAdminUpdate,
    principal: SuperAdminPrincipal = Depends(verify_super_admin_session),
):
    return await update_super_admin_details(principal.id, payload)


@router.patch("/change-password")
@document_response(message="Password changed successfully", response_codes={400: "Invalid old password"})
async def change_password(
    payload: ChangePasswordRequest,
    principal: SuperAdminPrincipal = Depends(verify_super_admin_session),
):
    await session_service.change_password(PrincipalKind.SUPER_ADMIN, principal.id, payload)
    return None
