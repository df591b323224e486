from __future__ import annotations

import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from core.errors import AppException
from schemas.super_admin_schema import SuperAdminCreate, SuperAdminOut, SuperAdminRegister
from security.principal import SuperAdminPrincipal
from services import super_admin_service


def _payload(username: str = "root") -> SuperAdminRegister:
    return SuperAdminRegister(displayName="Root Admin", username=username, password="secret123")


@pytest.fixture
def admins(monkeypatch: pytest.MonkeyPatch):
    stored: list[SuperAdminCreate] = []
    bootstrapped: list[str] = []

    async def _count():
        return len(stored)

    async def _get(filter_dict: dict):
        for record in stored:
            if record.username == filter_dict.get("username"):
                return SuperAdminOut(_id="admin-1", **record.model_dump(exclude={"password"}))
        return None

    async def _create(record: SuperAdminCreate, *, bootstrap: bool = False):
        if bootstrap:
            if bootstrapped:
                raise DuplicateKeyError("E11000 duplicate key", 11000, {"keyPattern": {"bootstrap": 1}})
            bootstrapped.append(record.username)
        stored.append(record)
        return SuperAdminOut(_id=f"admin-{len(stored)}", **record.model_dump(exclude={"password"}))

    monkeypatch.setattr(super_admin_service, "count_super_admins", _count)
    monkeypatch.setattr(super_admin_service, "get_super_admin", _get)
    monkeypatch.setattr(super_admin_service, "create_super_admin", _create)
    return stored


@pytest.mark.asyncio
async def test_first_super_admin_registers_without_session(admins):
    created = await super_admin_service.register_super_admin(_payload())

    assert created.username == "root"
    assert admins[0].password != "secret123"


@pytest.mark.asyncio
async def test_second_super_admin_needs_existing_super_admin(admins):
    await super_admin_service.register_super_admin(_payload())

    with pytest.raises(AppException) as exc_info:
        await super_admin_service.register_super_admin(_payload("second"))

    assert exc_info.value.status_code == 403

    actor = SuperAdminPrincipal(_id="admin-1", username="root")
    created = await super_admin_service.register_super_admin(_payload("second"), actor=actor)
    assert created.username == "second"


@pytest.mark.asyncio
async def test_duplicate_username_conflicts(admins):
    actor = SuperAdminPrincipal(_id="admin-1", username="root")
    await super_admin_service.register_super_admin(_payload())

    with pytest.raises(AppException) as exc_info:
        await super_admin_service.register_super_admin(_payload("ROOT"), actor=actor)

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_concurrent_first_registrations_admit_only_one(monkeypatch: pytest.MonkeyPatch, admins):
    async def _nobody_yet():
        # both callers see an empty collection before either insert lands
        await asyncio.sleep(0)
        return 0

    monkeypatch.setattr(super_admin_service, "count_super_admins", _nobody_yet)

    outcomes = await asyncio.gather(
        super_admin_service.register_super_admin(_payload("first")),
        super_admin_service.register_super_admin(_payload("second")),
        return_exceptions=True,
    )

    created = [outcome for outcome in outcomes if isinstance(outcome, SuperAdminOut)]
    rejected = [outcome for outcome in outcomes if isinstance(outcome, AppException)]
    assert len(created) == 1
    assert len(rejected) == 1
    assert rejected[0].status_code == 403
    assert rejected[0].detail["message"] == super_admin_service.BOOTSTRAP_CLOSED_MESSAGE
    assert len(admins) == 1
