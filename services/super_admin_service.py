from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from core.errors import auth_permission_denied, conflict, invalid_input, resource_not_found
from repositories.super_admin_repo import (
    count_super_admins,
    create_super_admin,
    get_super_admin,
    update_super_admin,
)
from schemas.imports import now_epoch
from schemas.super_admin_schema import SuperAdminCreate, SuperAdminOut, SuperAdminRegister, SuperAdminUpdate
from security.principal import SuperAdminPrincipal

logger = logging.getLogger(__name__)

BOOTSTRAP_CLOSED_MESSAGE = "Only a super admin can register another super admin"


async def register_super_admin(
    payload: SuperAdminRegister,
    actor: Optional[SuperAdminPrincipal] = None,
) -> SuperAdminOut:
    """Creates a super admin.

    The first super admin may register without a session; after that only an
    existing super admin can add another.

    Raises:
        AppException 403: a super admin exists and no super admin session was presented
        AppException 409: username already taken
    """
    bootstrap = actor is None
    if bootstrap and await count_super_admins() > 0:
        raise auth_permission_denied(message=BOOTSTRAP_CLOSED_MESSAGE)

    if await get_super_admin({"username": payload.username}) is not None:
        raise conflict("Super admin with username already exists")

    record = await run_in_threadpool(SuperAdminCreate, **payload.model_dump())
    try:
        created = await create_super_admin(record, bootstrap=bootstrap)
    except DuplicateKeyError as exc:
        # a concurrent first registration already took the bootstrap marker
        if "bootstrap" in (exc.details or {}).get("keyPattern", {}):
            raise auth_permission_denied(message=BOOTSTRAP_CLOSED_MESSAGE)
        raise conflict("Super admin with username already exists")

    logger.info("super admin registered id=%s by=%s", created.id, actor.id if actor else "bootstrap")
    return created


async def retrieve_super_admin(super_admin_id: str) -> SuperAdminOut:
    result = await get_super_admin_by_id(super_admin_id)
    if result is None:
        raise resource_not_found("Super admin", super_admin_id)
    return result


async def get_super_admin_by_id(super_admin_id: str) -> Optional[SuperAdminOut]:
    if not ObjectId.is_valid(super_admin_id):
        return None
    return await get_super_admin({"_id": ObjectId(super_admin_id)})


async def update_super_admin_details(super_admin_id: str, payload: SuperAdminUpdate) -> SuperAdminOut:
    """
    Raises:
        AppException 400: nothing to update
        AppException 409: new username already taken
    """
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise invalid_input("At least one of the following fields must be provided: displayName, username")

    if "username" in changes:
        existing = await get_super_admin({"username": changes["username"]})
        if existing is not None and existing.id != super_admin_id:
            raise conflict("Username already exists")

    changes["updatedAt"] = now_epoch()
    try:
        updated = await update_super_admin(super_admin_id, changes)
    except DuplicateKeyError:
        raise conflict("Username already exists")
    if updated is None:
        raise resource_not_found("Super admin", super_admin_id)
    return updated
