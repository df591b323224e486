from __future__ import annotations

import asyncio
import os
from collections import defaultdict
from typing import Any, Optional

TEST_ENV = {
    "ENV": "test",
    "MONGO_URL": "mongodb://localhost:27017",
    "DB_NAME": "restaurant_test",
    "SUPER_ADMIN_ACCESS_TOKEN_SECRET": "super-admin-access-secret-for-tests-0001",
    "SUPER_ADMIN_REFRESH_TOKEN_SECRET": "super-admin-refresh-secret-for-tests-0002",
    "RESTAURANT_ACCESS_TOKEN_SECRET": "restaurant-access-secret-for-tests-00003",
    "RESTAURANT_REFRESH_TOKEN_SECRET": "restaurant-refresh-secret-for-tests-0004",
    "WORKER_ACCESS_TOKEN_SECRET": "worker-access-secret-for-tests-000000005",
    "WORKER_REFRESH_TOKEN_SECRET": "worker-refresh-secret-for-tests-00000006",
    "STORAGE_BACKEND": "local",
    "RATE_LIMIT_STORAGE_URL": "memory://",
    "COOKIE_SECURE": "false",
}
for _key, _value in TEST_ENV.items():
    os.environ.setdefault(_key, _value)

import pytest
from bson import ObjectId

from core.settings import get_settings
from security.hash import hash_password
from security.principal import PrincipalKind


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakePrincipalStore:
    """In-memory stand-in for ``repositories.principal_repo`` keyed by kind and id."""

    def __init__(self) -> None:
        self.records: dict[PrincipalKind, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.reads = 0
        self.writes = 0

    def add(
        self,
        kind: PrincipalKind,
        *,
        username: str,
        password: str,
        status: bool = True,
        **fields: Any,
    ) -> dict[str, Any]:
        oid = ObjectId()
        document = {
            "_id": oid,
            "username": username,
            "displayName": fields.pop("displayName", username.title()),
            "password": hash_password(password),
            "status": status,
            **fields,
        }
        self.records[kind][str(oid)] = document
        return document

    def stored(self, kind: PrincipalKind, principal_id: Any) -> dict[str, Any]:
        return self.records[kind][str(principal_id)]

    @staticmethod
    def _without(document: dict[str, Any], *fields: str) -> dict[str, Any]:
        return {key: value for key, value in document.items() if key not in fields}

    async def get_principal_by_id(self, kind: PrincipalKind, principal_id: str) -> Optional[dict[str, Any]]:
        self.reads += 1
        document = self.records[kind].get(str(principal_id))
        # yield so concurrent callers all load before any of them writes
        await asyncio.sleep(0)
        if document is None:
            return None
        return self._without(document, "password", "refreshToken")

    async def get_principal_for_login(self, kind: PrincipalKind, field: str, value: str) -> Optional[dict[str, Any]]:
        self.reads += 1
        for document in self.records[kind].values():
            if document.get(field) == value:
                return self._without(document, "refreshToken")
        return None

    async def get_password_hash(self, kind: PrincipalKind, principal_id: str) -> Optional[str]:
        document = self.records[kind].get(str(principal_id))
        return None if document is None else document["password"]

    async def set_refresh_token(self, kind: PrincipalKind, principal_id: str, refresh_token: str) -> bool:
        self.writes += 1
        self.records[kind][str(principal_id)]["refreshToken"] = refresh_token
        return True

    async def rotate_refresh_token(
        self,
        kind: PrincipalKind,
        principal_id: str,
        *,
        presented: str,
        replacement: str,
    ) -> Optional[dict[str, Any]]:
        self.writes += 1
        document = self.records[kind].get(str(principal_id))
        if document is None or document.get("refreshToken") != presented:
            return None
        document["refreshToken"] = replacement
        return self._without(document, "password", "refreshToken")

    async def clear_refresh_token(self, kind: PrincipalKind, principal_id: str) -> None:
        self.writes += 1
        self.records[kind][str(principal_id)].pop("refreshToken", None)

    async def update_password(self, kind: PrincipalKind, principal_id: str, hashed_password: str, *, updated_at: int) -> bool:
        self.writes += 1
        document = self.records[kind].get(str(principal_id))
        if document is None:
            return False
        document["password"] = hashed_password
        document["updatedAt"] = updated_at
        document.pop("refreshToken", None)
        return True


@pytest.fixture
def principal_store(monkeypatch: pytest.MonkeyPatch) -> FakePrincipalStore:
    store = FakePrincipalStore()
    for name in (
        "get_principal_by_id",
        "get_principal_for_login",
        "get_password_hash",
        "set_refresh_token",
        "rotate_refresh_token",
        "clear_refresh_token",
        "update_password",
    ):
        monkeypatch.setattr(f"services.session_service.{name}", getattr(store, name))
    monkeypatch.setattr("security.auth.get_principal_by_id", store.get_principal_by_id)
    return store
