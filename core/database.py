from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from core.settings import get_settings

logger = logging.getLogger(__name__)

PRINCIPAL_COLLECTIONS = ("super_admins", "restaurants", "workers")


class _LazyDatabase:
    """Resolves the configured database on first attribute access.

    Importing repositories must not require a reachable server or a complete
    environment, so the client is only built when a collection is used.
    """

    def __init__(self) -> None:
        self._client: AsyncMongoClient | None = None
        self._database: AsyncDatabase | None = None
        self._lock = Lock()

    def _resolve(self) -> AsyncDatabase:
        if self._database is not None:
            return self._database
        with self._lock:
            if self._database is None:
                settings = get_settings()
                self._client = AsyncMongoClient(settings.mongo_url, serverSelectionTimeoutMS=2000)
                self._database = self._client[settings.db_name]
        return self._database

    @property
    def client(self) -> AsyncMongoClient:
        self._resolve()
        assert self._client is not None
        return self._client

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._resolve(), name)

    def __getitem__(self, name: str) -> Any:
        return self._resolve()[name]

    async def close(self) -> None:
        with self._lock:
            client, self._client, self._database = self._client, None, None
        if client is not None:
            await client.close()


db = _LazyDatabase()


async def ping() -> None:
    await db.client.admin.command("ping")


async def ensure_indexes() -> None:
    for collection in PRINCIPAL_COLLECTIONS:
        await db[collection].create_index([("username", ASCENDING)], unique=True)
    await db.restaurants.create_index([("phoneNumber", ASCENDING)], unique=True, sparse=True)
    await db.workers.create_index([("phoneNumber", ASCENDING)], unique=True, sparse=True)
    await db.super_admins.create_index([("bootstrap", ASCENDING)], unique=True, sparse=True)
    await db.plans.create_index([("displayName", ASCENDING)], unique=True)
    for collection in ("workers", "worker_roles", "worker_shifts", "product_categories",
                       "products", "order_statuses", "orders"):
        await db[collection].create_index([("restroId", ASCENDING)])
    logger.info("database indexes ensured")
