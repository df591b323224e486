from __future__ import annotations

import logging
import math
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import jwt
import redis
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from core.database import db, ensure_indexes, ping
from core.errors import ErrorCode
from core.logging_config import setup_logging
from core.response_envelope import (
    apply_response_documentation,
    document_response,
    error_response,
    http_exception_response,
)
from core.role_config import ANONYMOUS_BUCKET, build_kind_rate_limits
from core.settings import get_settings
from core.storage.manager import ImageStorageManager
from core.validation_errors import format_validation_error_details
from security.cookies import ACCESS_COOKIE_NAME
from security.encrypting_jwt import decode_access_token, peek_kind

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger("restaurant_api")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response


RATE_LIMITS = build_kind_rate_limits(settings.role_rate_limits)
limiter = FixedWindowRateLimiter(storage_from_string(settings.rate_limit_storage_url))


def get_rate_limit_identity(request: Request) -> tuple[str, str]:
    """Returns ``(key, bucket)``; a verified access token buckets by principal kind, anything else by client address."""
    fallback_id = request.headers.get("X-Forwarded-For") or (request.client.host if request.client else "unknown")

    token = request.cookies.get(ACCESS_COOKIE_NAME)
    auth_header = request.headers.get("Authorization")
    if not token and auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", maxsplit=1)[1]
    if not token:
        return fallback_id, ANONYMOUS_BUCKET

    kind = peek_kind(token)
    if kind is None:
        return fallback_id, ANONYMOUS_BUCKET
    try:
        claims = decode_access_token(kind, token)
    except jwt.InvalidTokenError:
        return fallback_id, ANONYMOUS_BUCKET

    return f"{kind.value}:{claims['sub']}", kind.value


class RateLimitingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        identity, bucket = get_rate_limit_identity(request)
        rate_limit_rule = RATE_LIMITS.get(bucket, RATE_LIMITS[ANONYMOUS_BUCKET])

        allowed = limiter.hit(rate_limit_rule, bucket, identity)
        reset_time, remaining = limiter.get_window_stats(rate_limit_rule, bucket, identity)
        seconds_until_reset = max(math.ceil(reset_time - time.time()), 0)

        headers = {
            "X-RateLimit-Limit": str(rate_limit_rule.amount),
            "X-RateLimit-Remaining": str(max(remaining, 0)),
            "X-RateLimit-Reset": str(seconds_until_reset),
        }

        if not allowed:
            headers["Retry-After"] = str(seconds_until_reset)
            logger.warning("rate limit hit bucket=%s identity=%s", bucket, identity)
            return error_response(
                status_code=429,
                message="Too Many Requests",
                data={
                    "code": ErrorCode.TOO_MANY_REQUESTS.value,
                    "details": {"retry_after_seconds": seconds_until_reset, "bucket": bucket},
                },
                headers=headers,
                request_id=getattr(request.state, "request_id", None),
            )

        response = await call_next(request)
        for key, value in headers.items():
            response.headers[key] = value
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    ImageStorageManager.configure_from_settings()
    try:
        await ensure_indexes()
    except PyMongoError as exc:
        logger.error("could not ensure database indexes: %s", exc)

    try:
        yield
    finally:
        await db.close()


app = FastAPI(lifespan=lifespan, title="Restaurant API")
# last added runs first; the request id must exist before the limiter answers
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RateLimitingMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins) if settings.cors_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
if settings.storage_backend == "local" and settings.media_base_url.startswith("/"):
    app.mount(
        settings.media_base_url,
        StaticFiles(directory=settings.storage_local_root, check_dir=False),
        name="media",
    )


@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
    return http_exception_response(exc=exc, request=request)


@app.exception_handler(RequestValidationError)
async def custom_validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        status_code=400,
        message="Validation error",
        data={"code": ErrorCode.VALIDATION_FAILED.value, "details": format_validation_error_details(exc.errors())},
        request_id=getattr(request.state, "request_id", None),
    )


@app.exception_handler(Exception)
async def custom_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    details = str(exc) if (settings.debug_include_error_details and not settings.is_production) else None
    return error_response(
        status_code=500,
        message="Internal Server Error",
        data={"code": ErrorCode.INTERNAL_ERROR.value, "details": details},
        request_id=getattr(request.state, "request_id", None),
    )


@app.get("/", tags=["Health"], include_in_schema=False)
@document_response(
    message="Successfully fetched data",
    success_example={"message": "Restaurant API is running"},
)
def read_root(request: Request):
    return {"message": "Restaurant API is running", "request_id": getattr(request.state, "request_id", None)}


async def _probe(name: str, check) -> dict[str, str | float]:
    start = time.perf_counter()
    try:
        await check()
    except (PyMongoError, redis.RedisError, OSError) as exc:
        logger.warning("health probe %s failed: %s", name, exc)
        return {"status": "unhealthy", "latency_ms": round((time.perf_counter() - start) * 1000, 2), "message": str(exc)}
    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        "message": f"{name} ping successful",
    }


async def _ping_rate_limit_store() -> None:
    client = redis.Redis.from_url(settings.rate_limit_storage_url, socket_connect_timeout=2)
    try:
        await run_in_threadpool(client.ping)
    finally:
        client.close()


@app.get("/health", tags=["Health"])
@document_response(
    message="Health check completed",
    success_example={"status": "healthy", "services": {"mongo": {"status": "healthy"}}},
)
async def health_check():
    services = {"mongo": await _probe("MongoDB", ping)}
    if settings.rate_limit_storage_url.startswith(("redis://", "rediss://")):
        services["redis"] = await _probe("Redis", _ping_rate_limit_store)

    healthy = all(service["status"] == "healthy" for service in services.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }

from api.v1.label_route import (
    order_status_router,
    product_category_router,
    worker_role_router,
    worker_shift_router,
)
from api.v1.order_route import router as v1_order_route_router
from api.v1.plan_route import router as v1_plan_route_router
from api.v1.product_route import router as v1_product_route_router
from api.v1.restaurant_route import router as v1_restaurant_route_router
from api.v1.super_admin_route import router as v1_super_admin_route_router
from api.v1.worker_route import router as v1_worker_route_router

API_PREFIX = "/api/v1"

app.include_router(v1_super_admin_route_router, prefix=API_PREFIX)
app.include_router(v1_restaurant_route_router, prefix=API_PREFIX)
app.include_router(v1_worker_route_router, prefix=API_PREFIX)
app.include_router(worker_role_router, prefix=API_PREFIX)
app.include_router(worker_shift_router, prefix=API_PREFIX)
app.include_router(product_category_router, prefix=API_PREFIX)
app.include_router(v1_product_route_router, prefix=API_PREFIX)
app.include_router(order_status_router, prefix=API_PREFIX)
app.include_router(v1_order_route_router, prefix=API_PREFIX)
app.include_router(v1_plan_route_router, prefix=API_PREFIX)

apply_response_documentation(app)
