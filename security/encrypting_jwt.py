from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from security.kinds import get_kind_config
from security.principal import PrincipalKind, SessionPrincipal

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenSigningError(RuntimeError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _encode(claims: dict[str, Any], secret: str, expire_minutes: int) -> str:
    issued_at = _utcnow()
    payload = {
        **claims,
        "jti": uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expire_minutes),
    }
    try:
        return jwt.encode(payload=payload, key=secret, algorithm=ALGORITHM, headers={"typ": "JWT"})
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        logger.error("token signing failed kind=%s typ=%s: %s", claims.get("kind"), claims.get("typ"), exc)
        raise TokenSigningError("Unable to sign token") from exc


def issue_access_token(kind: PrincipalKind, principal: SessionPrincipal) -> str:
    config = get_kind_config(kind)
    claims = {
        "sub": principal.id,
        "displayName": principal.displayName,
        "username": principal.username,
        "kind": config.kind.value,
        "typ": ACCESS_TOKEN_TYPE,
    }
    return _encode(claims, config.tokens.access_secret, config.tokens.access_expire_minutes)


def issue_refresh_token(kind: PrincipalKind, principal: SessionPrincipal) -> str:
    config = get_kind_config(kind)
    claims = {
        "sub": principal.id,
        "kind": config.kind.value,
        "typ": REFRESH_TOKEN_TYPE,
    }
    return _encode(claims, config.tokens.refresh_secret, config.tokens.refresh_expire_minutes)


def issue_token_pair(kind: PrincipalKind, principal: SessionPrincipal) -> tuple[str, str]:
    return issue_access_token(kind, principal), issue_refresh_token(kind, principal)


def _decode(token: str, *, secret: str, kind: PrincipalKind, token_type: str) -> dict[str, Any]:
    claims = jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
    if claims.get("typ") != token_type:
        raise jwt.InvalidTokenError("Unexpected token type")
    if claims.get("kind") != kind.value:
        raise jwt.InvalidTokenError("Unexpected principal kind")
    return claims


def decode_access_token(kind: PrincipalKind, token: str) -> dict[str, Any]:
    """Verify an access token with the access secret of ``kind`` only.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, malformed, or minted for
            another kind or token type.
    """
    config = get_kind_config(kind)
    return _decode(token, secret=config.tokens.access_secret, kind=config.kind, token_type=ACCESS_TOKEN_TYPE)


def decode_refresh_token(kind: PrincipalKind, token: str) -> dict[str, Any]:
    config = get_kind_config(kind)
    return _decode(token, secret=config.tokens.refresh_secret, kind=config.kind, token_type=REFRESH_TOKEN_TYPE)


def peek_kind(token: str) -> PrincipalKind | None:
    """Read the unverified ``kind`` claim. Only used to pick which secret verifies the token."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
        return PrincipalKind(claims.get("kind"))
    except (jwt.PyJWTError, ValueError):
        return None
