from __future__ import annotations

import logging
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from core.errors import auth_invalid_token, auth_unauthenticated
from repositories.principal_repo import get_principal_by_id
from security.cookies import ACCESS_COOKIE_NAME
from security.encrypting_jwt import decode_access_token, peek_kind
from security.principal import (
    PrincipalKind,
    RestaurantPrincipal,
    SessionPrincipal,
    StaffPrincipal,
    SuperAdminPrincipal,
    WorkerPrincipal,
    principal_from_document,
)

logger = logging.getLogger(__name__)

token_auth_scheme = HTTPBearer(auto_error=False)

STAFF_KINDS = (PrincipalKind.RESTAURANT, PrincipalKind.WORKER)


def extract_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    cookie_token = request.cookies.get(ACCESS_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


async def _resolve_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    allowed_kinds: tuple[PrincipalKind, ...],
) -> SessionPrincipal:
    token = extract_access_token(request, credentials)
    if not token:
        raise auth_unauthenticated()

    kind = allowed_kinds[0] if len(allowed_kinds) == 1 else peek_kind(token)
    if kind not in allowed_kinds:
        raise auth_invalid_token()

    try:
        claims = decode_access_token(kind, token)
    except jwt.InvalidTokenError as exc:
        logger.debug("access token rejected kind=%s: %s", kind.value, exc)
        raise auth_invalid_token()

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise auth_invalid_token()

    document = await get_principal_by_id(kind, subject)
    if document is None:
        raise auth_invalid_token()

    try:
        principal = principal_from_document(kind, document)
    except ValidationError:
        logger.warning("stored %s record %s does not form a principal", kind.value, subject)
        raise auth_invalid_token()

    request.state.principal = principal
    return principal


async def verify_super_admin_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_auth_scheme),
) -> SuperAdminPrincipal:
    return await _resolve_session(request, credentials, (PrincipalKind.SUPER_ADMIN,))


async def verify_restaurant_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_auth_scheme),
) -> RestaurantPrincipal:
    return await _resolve_session(request, credentials, (PrincipalKind.RESTAURANT,))


async def verify_worker_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_auth_scheme),
) -> WorkerPrincipal:
    return await _resolve_session(request, credentials, (PrincipalKind.WORKER,))


async def verify_staff_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_auth_scheme),
) -> StaffPrincipal:
    """Restaurant or worker session; the token's own kind picks the verifying secret."""
    return await _resolve_session(request, credentials, STAFF_KINDS)


async def optional_super_admin_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_auth_scheme),
) -> Optional[SuperAdminPrincipal]:
    """Super admin session when a token is presented, ``None`` otherwise. A bad token still fails."""
    if extract_access_token(request, credentials) is None:
        return None
    return await _resolve_session(request, credentials, (PrincipalKind.SUPER_ADMIN,))
