from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    AUTH_UNAUTHENTICATED = "AUTH_UNAUTHENTICATED"
    AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_ACCOUNT_INACTIVE = "AUTH_ACCOUNT_INACTIVE"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    IMAGE_UPLOAD_INVALID = "IMAGE_UPLOAD_INVALID"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(HTTPException):
    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        detail = {
            "message": message,
            "code": code.value,
            "details": details,
        }
        self.code = code
        super().__init__(status_code=status_code, detail=detail, headers=headers)


def auth_unauthenticated() -> AppException:
    return AppException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        code=ErrorCode.AUTH_UNAUTHENTICATED,
        message="Unauthorized request",
    )


def auth_invalid_token(message: str = "Invalid access token") -> AppException:
    return AppException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        code=ErrorCode.AUTH_INVALID_TOKEN,
        message=message,
    )


def auth_invalid_refresh_token() -> AppException:
    return auth_invalid_token(message="Invalid refresh token")


def auth_invalid_credentials() -> AppException:
    return AppException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        code=ErrorCode.AUTH_INVALID_CREDENTIALS,
        message="Invalid credentials",
    )


def auth_account_inactive(kind_label: str) -> AppException:
    return AppException(
        status_code=status.HTTP_403_FORBIDDEN,
        code=ErrorCode.AUTH_ACCOUNT_INACTIVE,
        message=f"{kind_label} account is not active",
    )


def auth_permission_denied(message: str = "You are not allowed to access this resource") -> AppException:
    return AppException(
        status_code=status.HTTP_403_FORBIDDEN,
        code=ErrorCode.AUTH_PERMISSION_DENIED,
        message=message,
    )


def invalid_input(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorCode.INVALID_INPUT,
        message=message,
        details=details,
    )


def conflict(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_409_CONFLICT,
        code=ErrorCode.CONFLICT,
        message=message,
        details=details,
    )


def resource_not_found(resource: str, resource_id: str | None = None) -> AppException:
    details = {"resource": resource}
    if resource_id:
        details["resource_id"] = resource_id
    return AppException(
        status_code=status.HTTP_404_NOT_FOUND,
        code=ErrorCode.RESOURCE_NOT_FOUND,
        message=f"{resource} not found",
        details=details,
    )


def image_upload_invalid(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> AppException:
    return AppException(
        status_code=status_code,
        code=ErrorCode.IMAGE_UPLOAD_INVALID,
        message=message,
    )
