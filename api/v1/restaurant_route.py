from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Request, Response, UploadFile

from core.response_envelope import document_response
from schemas.restaurant_schema import RestaurantRegister, RestaurantUpdate
from schemas.session_schema import ChangePasswordRequest, LoginRequest, RefreshRequest
from security.auth import verify_restaurant_session
from security.cookies import extract_refresh_token
from security.principal import PrincipalKind, RestaurantPrincipal
from services import session_service
from services.restaurant_service import (
    register_restaurant,
    retrieve_restaurant,
    update_restaurant_avatar,
    update_restaurant_details,
)

router = APIRouter(prefix="/restaurants", tags=["Restaurants"])


@router.post("/register")
@document_response(
    message="Restaurant registered successfully",
    status_code=201,
    response_codes={409: "Restaurant with phone number or username already exists"},
)
async def register(payload: RestaurantRegister):
    return await register_restaurant(payload)


@router.post("/login")
@document_response(
    message="Login successful",
    response_codes={401: "Invalid credentials", 403: "Restaurant account is not active"},
)
async def login(payload: LoginRequest, response: Response):
    return await session_service.login(PrincipalKind.RESTAURANT, payload, response)


@router.post("/refresh-token")
@document_response(message="Access token refreshed", response_codes={401: "Invalid refresh token"})
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = Body(default=None),
):
    presented = extract_refresh_token(request, payload.refreshToken if payload else None)
    return await session_service.refresh(PrincipalKind.RESTAURANT, presented, response)


@router.post("/logout")
@document_response(message="Logged out successfully")
async def logout(
    response: Response,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    await session_service.logout(PrincipalKind.RESTAURANT, principal, response)
    return None


@router.get("/me")
@document_response(message="Restaurant fetched successfully")
async def get_me(principal: RestaurantPrincipal = Depends(verify_restaurant_session)):
    return await retrieve_restaurant(principal.id)


@router.patch("/me")
@document_response(message="Restaurant details updated successfully")
async def update_me(
    payload: RestaurantUpdate,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await update_restaurant_details(principal.id, payload)


@router.patch("/avatar")
@document_response(message="Avatar updated successfully", response_codes={413: "Image too large"})
async def update_avatar(
    avatar: UploadFile = File(...),
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    return await update_restaurant_avatar(principal.id, avatar)


@router.patch("/change-password")
@document_response(message="Password changed successfully", response_codes={400: "Invalid old password"})
async def change_password(
    payload: ChangePasswordRequest,
    principal: RestaurantPrincipal = Depends(verify_restaurant_session),
):
    await session_service.change_password(PrincipalKind.RESTAURANT, principal.id, payload)
    return None


@router.get("/{restaurant_id}")
@document_response(message="Restaurant fetched successfully")
async def get_restaurant(restaurant_id: str):
    return await retrieve_restaurant(restaurant_id)
