from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.responses import Response

from core.errors import ErrorCode

_ENVELOPE_ATTR = "__route_envelope__"

# error code shown in the generated docs for each documented failure status
DOCUMENTED_ERROR_CODES: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.INVALID_INPUT,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_INVALID_TOKEN,
    status.HTTP_403_FORBIDDEN: ErrorCode.AUTH_PERMISSION_DENIED,
    status.HTTP_404_NOT_FOUND: ErrorCode.RESOURCE_NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: ErrorCode.IMAGE_UPLOAD_INVALID,
}


@dataclass(frozen=True)
class RouteEnvelope:
    message: str
    status_code: int
    description: str
    success_example: Any | None = None
    summary: str | None = None
    response_codes: dict[int, str] = field(default_factory=dict)


def success_payload(data: Any, message: str = "Success", *, request_id: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": True, "message": message, "data": data}
    if request_id:
        payload["requestId"] = request_id
    return payload


def error_payload(message: str, data: Any = None, *, request_id: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "message": message, "data": data}
    if request_id:
        payload["requestId"] = request_id
    return payload


def error_response(
    *,
    status_code: int,
    message: str,
    data: Any = None,
    headers: dict[str, str] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=jsonable_encoder(error_payload(message=message, data=data, request_id=request_id)),
    )


def _split_exception_detail(detail: Any) -> tuple[str, dict[str, Any]]:
    """``AppException`` details carry ``{message, code, details}``; plain HTTPExceptions a string or nothing."""
    if isinstance(detail, dict) and isinstance(detail.get("message"), str) and detail["message"].strip():
        return detail["message"], {"code": detail.get("code", "HTTP_EXCEPTION"), "details": detail.get("details")}
    if isinstance(detail, dict):
        return "Request failed", {"code": "HTTP_EXCEPTION", "details": detail}
    if detail is None:
        return "Request failed", {"code": "HTTP_EXCEPTION", "details": None}
    return str(detail), {"code": "HTTP_EXCEPTION", "details": None}


def request_id_from_request(request: Request | None) -> str | None:
    if request is None:
        return None
    return getattr(request.state, "request_id", None)


def http_exception_response(exc: HTTPException, request: Request | None = None) -> JSONResponse:
    message, data = _split_exception_detail(exc.detail)
    return error_response(
        status_code=exc.status_code,
        message=message,
        data=data,
        request_id=request_id_from_request(request),
        headers=exc.headers,
    )


def _find_argument(kind: type, *args: Any, **kwargs: Any) -> Any | None:
    for value in (*kwargs.values(), *args):
        if isinstance(value, kind):
            return value
    return None


def _carry_headers(source: Response, target: Response) -> None:
    for key, value in source.raw_headers:
        if key.lower() != b"content-length":
            target.raw_headers.append((key, value))


def document_response(
    *,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
    description: str = "Successful response",
    success_example: Any | None = None,
    summary: str | None = None,
    response_codes: dict[int, str] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Wrap a route's return value in the success envelope.

    Headers the handler wrote on an injected ``Response`` parameter (cookies
    from login, refresh and logout) are carried over to the envelope.
    ``response_codes`` lists the failure statuses shown in the generated docs.
    """
    envelope = RouteEnvelope(
        message=message,
        status_code=status_code,
        description=description,
        success_example=success_example,
        summary=summary,
        response_codes=dict(response_codes or {}),
    )

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Response:
            result = func(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, Response):
                return result

            request = _find_argument(Request, *args, **kwargs)
            body = success_payload(result, envelope.message, request_id=request_id_from_request(request))
            response = JSONResponse(status_code=envelope.status_code, content=jsonable_encoder(body))

            injected = _find_argument(Response, *args, **kwargs)
            if injected is not None:
                _carry_headers(injected, response)
            return response

        setattr(wrapper, _ENVELOPE_ATTR, envelope)
        return wrapper

    return decorator


def _documented_error(status_code: int, description: str) -> dict[str, Any]:
    code = DOCUMENTED_ERROR_CODES.get(status_code, ErrorCode.INTERNAL_ERROR)
    example = error_payload(message=description, data={"code": code.value, "details": None})
    return {"description": description, "content": {"application/json": {"example": example}}}


def apply_response_documentation(app: FastAPI) -> None:
    """Copy every ``document_response`` envelope onto its route's OpenAPI entry."""
    changed = False

    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        envelope = getattr(route.endpoint, _ENVELOPE_ATTR, None)
        if not isinstance(envelope, RouteEnvelope):
            continue

        if envelope.summary and not route.summary:
            route.summary = envelope.summary
        route.status_code = envelope.status_code

        responses = dict(route.responses or {})
        responses.setdefault(
            envelope.status_code,
            {
                "description": envelope.description,
                "content": {
                    "application/json": {
                        "example": success_payload(envelope.success_example, envelope.message),
                    }
                },
            },
        )
        for code, code_description in envelope.response_codes.items():
            responses.setdefault(code, _documented_error(code, code_description))

        route.responses = responses
        changed = True

    if changed:
        app.openapi_schema = None
