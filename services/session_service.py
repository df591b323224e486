from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Response
from starlette.concurrency import run_in_threadpool

from core.errors import (
    auth_invalid_credentials,
    auth_invalid_refresh_token,
    auth_unauthenticated,
    invalid_input,
    resource_not_found,
)
from repositories.principal_repo import (
    clear_refresh_token,
    get_password_hash,
    get_principal_by_id,
    get_principal_for_login,
    rotate_refresh_token,
    set_refresh_token,
    update_password,
)
from schemas.imports import now_epoch
from schemas.restaurant_schema import RestaurantOut
from schemas.session_schema import ChangePasswordRequest, LoginRequest
from schemas.super_admin_schema import SuperAdminOut
from schemas.worker_schema import WorkerOut
from security.account_status_check import ensure_account_active, is_account_active
from security.cookies import clear_session_cookies, set_session_cookies
from security.encrypting_jwt import decode_refresh_token, issue_token_pair
from security.hash import check_password, hash_password
from security.kinds import get_kind_config
from security.principal import PrincipalKind, SessionPrincipal, principal_from_document

logger = logging.getLogger(__name__)

PROFILE_SCHEMAS = {
    PrincipalKind.SUPER_ADMIN: SuperAdminOut,
    PrincipalKind.RESTAURANT: RestaurantOut,
    PrincipalKind.WORKER: WorkerOut,
}


class RefreshRejected(Exception):
    pass


def _login_identifier(kind: PrincipalKind, credentials: LoginRequest) -> tuple[Optional[str], Optional[str]]:
    for field in get_kind_config(kind).login_fields:
        value = getattr(credentials, field, None)
        if isinstance(value, str) and value.strip():
            value = value.strip()
            return field, value.lower() if field == "username" else value
    return None, None


def _session_payload(kind: PrincipalKind, document: dict[str, Any], access_token: str, refresh_token: str) -> dict[str, Any]:
    profile = PROFILE_SCHEMAS[kind](**document)
    return {
        "accessToken": access_token,
        "refreshToken": refresh_token,
        "profile": profile,
    }


async def login(kind: PrincipalKind, credentials: LoginRequest, response: Response) -> dict[str, Any]:
    """Verify credentials and start a session for a principal of ``kind``.

    Raises:
        AppException 400: identifier or password missing
        AppException 401: unknown principal or wrong password (same response for both)
        AppException 403: password matched but the account is inactive
    """
    field, identifier = _login_identifier(kind, credentials)
    if identifier is None or not credentials.password:
        fields = " or ".join(get_kind_config(kind).login_fields)
        raise invalid_input(f"{fields} and password are required")

    document = await get_principal_for_login(kind, field, identifier)
    if document is None:
        logger.info("login rejected kind=%s reason=unknown", kind.value)
        raise auth_invalid_credentials()

    stored_hash = document.pop("password", None) or ""
    if not await run_in_threadpool(check_password, credentials.password, stored_hash):
        logger.info("login rejected kind=%s id=%s reason=password", kind.value, document.get("_id"))
        raise auth_invalid_credentials()

    ensure_account_active(kind, document)

    principal = principal_from_document(kind, document)
    access_token, refresh_token = issue_token_pair(kind, principal)
    await set_refresh_token(kind, principal.id, refresh_token)

    set_session_cookies(response, access_token=access_token, refresh_token=refresh_token)
    logger.info("login kind=%s id=%s", kind.value, principal.id)
    return _session_payload(kind, document, access_token, refresh_token)


async def refresh(kind: PrincipalKind, presented: Optional[str], response: Response) -> dict[str, Any]:
    """Rotate the refresh token of a principal of ``kind``.

    The stored token is swapped for the new one in a single conditional
    update, so a token can be redeemed at most once. Every rejection after the
    missing-token check is the same 401.
    """
    if not presented:
        raise auth_unauthenticated()

    try:
        claims = decode_refresh_token(kind, presented)
        document = await get_principal_by_id(kind, claims["sub"])
        if document is None:
            raise RefreshRejected("principal not found")
        if not is_account_active(document):
            raise RefreshRejected("account inactive")

        principal = principal_from_document(kind, document)
        access_token, refresh_token = issue_token_pair(kind, principal)
        rotated = await rotate_refresh_token(
            kind,
            principal.id,
            presented=presented,
            replacement=refresh_token,
        )
        if rotated is None:
            raise RefreshRejected("refresh token is not current")
    except Exception as exc:
        logger.warning("refresh rejected kind=%s: %s", kind.value, exc)
        raise auth_invalid_refresh_token() from exc

    set_session_cookies(response, access_token=access_token, refresh_token=refresh_token)
    return _session_payload(kind, rotated, access_token, refresh_token)


async def logout(kind: PrincipalKind, principal: SessionPrincipal, response: Response) -> None:
    await clear_refresh_token(kind, principal.id)
    clear_session_cookies(response)
    logger.info("logout kind=%s id=%s", kind.value, principal.id)


async def set_password(kind: PrincipalKind, principal_id: str, new_password: str) -> None:
    """Store a new password hash and end every refresh lineage of the principal."""
    hashed = await run_in_threadpool(hash_password, new_password)
    if not await update_password(kind, principal_id, hashed, updated_at=now_epoch()):
        raise resource_not_found(get_kind_config(kind).label, principal_id)


async def change_password(kind: PrincipalKind, principal_id: str, payload: ChangePasswordRequest) -> None:
    """
    Raises:
        AppException 404: principal no longer exists
        AppException 400: old password does not match
    """
    stored_hash = await get_password_hash(kind, principal_id)
    if stored_hash is None:
        raise resource_not_found(get_kind_config(kind).label, principal_id)
    if not await run_in_threadpool(check_password, payload.oldPassword, stored_hash):
        raise invalid_input("Invalid old password")
    await set_password(kind, principal_id, payload.newPassword)
    logger.info("password changed kind=%s id=%s", kind.value, principal_id)
