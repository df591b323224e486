from __future__ import annotations

import logging
from typing import Any, List

from fastapi import Response, UploadFile
from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from core.errors import conflict, invalid_input, resource_not_found
from repositories.worker_repo import (
    create_worker,
    delete_worker,
    find_worker_conflict,
    get_worker_by_id,
    get_worker_profile,
    get_workers,
    set_logged_in,
    update_worker,
)
from schemas.imports import now_epoch
from schemas.session_schema import LoginRequest
from schemas.worker_schema import (
    WorkerCreate,
    WorkerInsert,
    WorkerOut,
    WorkerProfileOut,
    WorkerSelfUpdate,
    WorkerUpdate,
)
from security.account_status_check import ensure_same_restaurant
from security.principal import PrincipalKind, RestaurantPrincipal, StaffPrincipal, WorkerPrincipal
from services import session_service
from services.image_service import store_image
from services.label_service import WORKER_ROLES, WORKER_SHIFTS, require_restaurant_label

logger = logging.getLogger(__name__)

DUPLICATE_WORKER_MESSAGE = "Worker with username or phone number already exists"


async def _check_role_and_shift(restro_id: str, changes: dict[str, Any]) -> None:
    if changes.get("roleId") is not None:
        await require_restaurant_label(WORKER_ROLES, restro_id, changes["roleId"])
    if changes.get("shiftId") is not None:
        await require_restaurant_label(WORKER_SHIFTS, restro_id, changes["shiftId"])


async def add_worker(principal: RestaurantPrincipal, payload: WorkerInsert) -> WorkerOut:
    """adds a worker to the signed-in restaurant

    Raises:
        AppException 400: role or shift belongs to another restaurant
        AppException 409: username or phone number already registered
    """
    await _check_role_and_shift(principal.restro_id, payload.model_dump())

    if await find_worker_conflict(username=payload.username, phone_number=payload.phoneNumber) is not None:
        raise conflict(DUPLICATE_WORKER_MESSAGE)

    record = await run_in_threadpool(WorkerCreate, restroId=principal.restro_id, **payload.model_dump())
    try:
        created = await create_worker(record)
    except DuplicateKeyError:
        raise conflict(DUPLICATE_WORKER_MESSAGE)

    logger.info("worker added id=%s restro=%s", created.id, principal.restro_id)
    return created


async def retrieve_workers(restro_id: str, start: int = 0, stop: int = 100) -> List[WorkerOut]:
    return await get_workers({"restroId": restro_id}, start=start, stop=stop)


async def retrieve_worker(worker_id: str) -> WorkerOut:
    result = await get_worker_by_id(worker_id)
    if result is None:
        raise resource_not_found("Worker", worker_id)
    return result


async def retrieve_worker_for_staff(principal: StaffPrincipal, worker_id: str) -> WorkerOut:
    worker = await retrieve_worker(worker_id)
    ensure_same_restaurant(principal, worker.restroId, resource="worker")
    return worker


async def retrieve_worker_profile(principal: StaffPrincipal, username: str) -> WorkerProfileOut:
    """
    Raises:
        AppException 403: worker belongs to another restaurant
        AppException 404: worker not found
    """
    result = await get_worker_profile(username.strip().lower())
    if result is None:
        raise resource_not_found("Worker", username)
    ensure_same_restaurant(principal, result.restroId, resource="worker")
    return result


async def _apply_worker_changes(worker_id: str, changes: dict[str, Any]) -> WorkerOut:
    if not changes:
        raise invalid_input("At least one field must be provided")
    if changes.get("phoneNumber"):
        if await find_worker_conflict(phone_number=changes["phoneNumber"], exclude_id=worker_id) is not None:
            raise conflict(DUPLICATE_WORKER_MESSAGE)
    changes["updatedAt"] = now_epoch()
    try:
        updated = await update_worker(worker_id, changes)
    except DuplicateKeyError:
        raise conflict(DUPLICATE_WORKER_MESSAGE)
    if updated is None:
        raise resource_not_found("Worker", worker_id)
    return updated


async def update_worker_by_restaurant(principal: RestaurantPrincipal, worker_id: str, payload: WorkerUpdate) -> WorkerOut:
    """
    Raises:
        AppException 403: worker belongs to another restaurant
        AppException 404: worker not found
    """
    await retrieve_worker_for_staff(principal, worker_id)
    changes = payload.model_dump(exclude_none=True)
    await _check_role_and_shift(principal.restro_id, changes)
    return await _apply_worker_changes(worker_id, changes)


async def update_worker_self(principal: WorkerPrincipal, payload: WorkerSelfUpdate) -> WorkerOut:
    return await _apply_worker_changes(principal.id, payload.model_dump(exclude_none=True))


async def update_worker_avatar(principal: WorkerPrincipal, upload: UploadFile) -> WorkerOut:
    stored = await store_image(upload=upload, owner_id=principal.id, folder="workers")
    return await _apply_worker_changes(principal.id, {"avatar": stored.url})


async def set_worker_password_by_restaurant(principal: RestaurantPrincipal, worker_id: str, new_password: str) -> None:
    await retrieve_worker_for_staff(principal, worker_id)
    await session_service.set_password(PrincipalKind.WORKER, worker_id, new_password)
    logger.info("worker password reset id=%s by restro=%s", worker_id, principal.restro_id)


async def remove_worker(principal: RestaurantPrincipal, worker_id: str) -> None:
    """deletes a worker of the signed-in restaurant

    Raises:
        AppException 403: worker belongs to another restaurant
        AppException 404: worker not found
    """
    await retrieve_worker_for_staff(principal, worker_id)
    if not await delete_worker(worker_id):
        raise resource_not_found("Worker", worker_id)
    logger.info("worker removed id=%s restro=%s", worker_id, principal.restro_id)


async def login_worker(credentials: LoginRequest, response: Response) -> dict[str, Any]:
    session = await session_service.login(PrincipalKind.WORKER, credentials, response)
    await set_logged_in(session["profile"].id, True)
    session["profile"].isLoggedIn = True
    return session


async def logout_worker(principal: WorkerPrincipal, response: Response) -> None:
    await session_service.logout(PrincipalKind.WORKER, principal, response)
    await set_logged_in(principal.id, False)
