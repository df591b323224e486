from __future__ import annotations

from typing import Optional

from fastapi import Request, Response

from core.settings import get_settings

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


def set_session_cookies(response: Response, *, access_token: str, refresh_token: str) -> None:
    settings = get_settings()
    for key, value in ((ACCESS_COOKIE_NAME, access_token), (REFRESH_COOKIE_NAME, refresh_token)):
        response.set_cookie(
            key=key,
            value=value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
            path="/",
        )


def clear_session_cookies(response: Response) -> None:
    settings = get_settings()
    for key in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        response.delete_cookie(
            key=key,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
            path="/",
        )


def extract_refresh_token(request: Request, body_token: Optional[str] = None) -> Optional[str]:
    return request.cookies.get(REFRESH_COOKIE_NAME) or body_token or None
