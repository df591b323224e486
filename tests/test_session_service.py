from __future__ import annotations

import asyncio

import jwt
import pytest
from fastapi import Response

from core.errors import AppException, ErrorCode
from schemas.session_schema import ChangePasswordRequest, LoginRequest
from security.encrypting_jwt import decode_access_token, decode_refresh_token
from security.hash import check_password
from security.principal import PrincipalKind, principal_from_document
from services import session_service


def _cookies(response: Response) -> list[str]:
    return response.headers.getlist("set-cookie")


def _add_restaurant(principal_store, **overrides):
    fields = {
        "username": "tasty",
        "password": "secret123",
        "displayName": "Tasty Bites",
        "phoneNumber": "9876543210",
        "managerName": "Asha",
    }
    fields.update(overrides)
    return principal_store.add(PrincipalKind.RESTAURANT, **fields)


def _add_worker(principal_store, **overrides):
    fields = {
        "username": "cook1",
        "password": "secret123",
        "displayName": "Cook One",
        "restroId": "restro-1",
        "roleId": "role-1",
        "shiftId": "shift-1",
        "phoneNumber": "9000000001",
    }
    fields.update(overrides)
    return principal_store.add(PrincipalKind.WORKER, **fields)


@pytest.mark.asyncio
async def test_login_issues_token_pair_stores_refresh_token_and_sets_cookies(principal_store):
    document = _add_restaurant(principal_store)
    response = Response()

    result = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        response,
    )

    claims = decode_access_token(PrincipalKind.RESTAURANT, result["accessToken"])
    assert claims["sub"] == str(document["_id"])
    assert claims["kind"] == "restaurant"
    assert claims["username"] == "tasty"
    assert claims["displayName"] == "Tasty Bites"
    assert principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])["refreshToken"] == result["refreshToken"]

    profile = result["profile"].model_dump()
    assert profile["id"] == str(document["_id"])
    assert "password" not in profile
    assert "refreshToken" not in profile

    cookies = _cookies(response)
    assert any(cookie.startswith("accessToken=") and "HttpOnly" in cookie for cookie in cookies)
    assert any(cookie.startswith("refreshToken=") and "HttpOnly" in cookie for cookie in cookies)


@pytest.mark.asyncio
async def test_login_accepts_phone_number_and_normalizes_username_case(principal_store):
    _add_restaurant(principal_store)

    by_phone = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(phoneNumber="9876543210", password="secret123"),
        Response(),
    )
    by_upper_username = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="TASTY", password="secret123"),
        Response(),
    )

    assert by_phone["profile"].username == "tasty"
    assert by_upper_username["profile"].username == "tasty"


@pytest.mark.asyncio
async def test_login_with_wrong_password_matches_unknown_user_response(principal_store):
    _add_restaurant(principal_store)

    with pytest.raises(AppException) as wrong_password:
        await session_service.login(
            PrincipalKind.RESTAURANT,
            LoginRequest(username="tasty", password="nope-nope"),
            Response(),
        )
    with pytest.raises(AppException) as unknown_user:
        await session_service.login(
            PrincipalKind.RESTAURANT,
            LoginRequest(username="ghost", password="secret123"),
            Response(),
        )

    assert wrong_password.value.status_code == 401
    assert wrong_password.value.detail == unknown_user.value.detail
    assert wrong_password.value.detail["code"] == ErrorCode.AUTH_INVALID_CREDENTIALS.value


@pytest.mark.asyncio
async def test_login_without_identifier_is_rejected_before_lookup(principal_store):
    with pytest.raises(AppException) as exc_info:
        await session_service.login(PrincipalKind.WORKER, LoginRequest(password="secret123"), Response())

    assert exc_info.value.status_code == 400
    assert principal_store.reads == 0


@pytest.mark.asyncio
async def test_login_of_inactive_account_is_forbidden_and_issues_nothing(principal_store):
    document = _add_worker(principal_store, status=False)
    response = Response()

    with pytest.raises(AppException) as exc_info:
        await session_service.login(
            PrincipalKind.WORKER,
            LoginRequest(username="cook1", password="secret123"),
            response,
        )

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail["code"] == ErrorCode.AUTH_ACCOUNT_INACTIVE.value
    assert "refreshToken" not in principal_store.stored(PrincipalKind.WORKER, document["_id"])
    assert _cookies(response) == []


@pytest.mark.asyncio
async def test_worker_login_claims_are_rejected_by_restaurant_secret(principal_store):
    _add_worker(principal_store)

    result = await session_service.login(
        PrincipalKind.WORKER,
        LoginRequest(username="cook1", password="secret123"),
        Response(),
    )

    assert decode_access_token(PrincipalKind.WORKER, result["accessToken"])["kind"] == "worker"
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(PrincipalKind.RESTAURANT, result["accessToken"])


@pytest.mark.asyncio
async def test_refresh_rotates_and_old_token_is_single_use(principal_store):
    document = _add_restaurant(principal_store)
    first = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        Response(),
    )
    response = Response()

    rotated = await session_service.refresh(PrincipalKind.RESTAURANT, first["refreshToken"], response)

    assert rotated["refreshToken"] != first["refreshToken"]
    assert rotated["accessToken"] != first["accessToken"]
    assert principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])["refreshToken"] == rotated["refreshToken"]
    assert decode_refresh_token(PrincipalKind.RESTAURANT, rotated["refreshToken"])["sub"] == str(document["_id"])
    assert any(cookie.startswith("refreshToken=") for cookie in _cookies(response))

    with pytest.raises(AppException) as exc_info:
        await session_service.refresh(PrincipalKind.RESTAURANT, first["refreshToken"], Response())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail["message"] == "Invalid refresh token"


@pytest.mark.asyncio
async def test_concurrent_refresh_with_same_token_succeeds_once(principal_store):
    _add_restaurant(principal_store)
    session = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        Response(),
    )

    outcomes = await asyncio.gather(
        session_service.refresh(PrincipalKind.RESTAURANT, session["refreshToken"], Response()),
        session_service.refresh(PrincipalKind.RESTAURANT, session["refreshToken"], Response()),
        return_exceptions=True,
    )

    successes = [outcome for outcome in outcomes if isinstance(outcome, dict)]
    failures = [outcome for outcome in outcomes if isinstance(outcome, AppException)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert failures[0].status_code == 401


@pytest.mark.asyncio
async def test_refresh_without_token_is_unauthenticated(principal_store):
    with pytest.raises(AppException) as exc_info:
        await session_service.refresh(PrincipalKind.WORKER, None, Response())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail["code"] == ErrorCode.AUTH_UNAUTHENTICATED.value


@pytest.mark.asyncio
async def test_refresh_token_of_another_kind_is_rejected(principal_store):
    _add_worker(principal_store)
    session = await session_service.login(
        PrincipalKind.WORKER,
        LoginRequest(username="cook1", password="secret123"),
        Response(),
    )

    with pytest.raises(AppException) as exc_info:
        await session_service.refresh(PrincipalKind.RESTAURANT, session["refreshToken"], Response())

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_access_token_is_not_accepted_as_refresh_token(principal_store):
    _add_restaurant(principal_store)
    session = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        Response(),
    )

    with pytest.raises(AppException) as exc_info:
        await session_service.refresh(PrincipalKind.RESTAURANT, session["accessToken"], Response())

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_refresh_of_deactivated_account_is_rejected(principal_store):
    document = _add_restaurant(principal_store)
    session = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        Response(),
    )
    principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])["status"] = False

    with pytest.raises(AppException) as exc_info:
        await session_service.refresh(PrincipalKind.RESTAURANT, session["refreshToken"], Response())

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_stored_token_and_cookies(principal_store):
    document = _add_worker(principal_store)
    session = await session_service.login(
        PrincipalKind.WORKER,
        LoginRequest(username="cook1", password="secret123"),
        Response(),
    )
    principal = await principal_store.get_principal_by_id(PrincipalKind.WORKER, str(document["_id"]))
    response = Response()

    await session_service.logout(
        PrincipalKind.WORKER,
        principal_from_document(PrincipalKind.WORKER, principal),
        response,
    )

    assert "refreshToken" not in principal_store.stored(PrincipalKind.WORKER, document["_id"])
    assert any(cookie.startswith("accessToken=") and "Max-Age=0" in cookie for cookie in _cookies(response))
    with pytest.raises(AppException):
        await session_service.refresh(PrincipalKind.WORKER, session["refreshToken"], Response())


@pytest.mark.asyncio
async def test_change_password_replaces_hash_and_invalidates_refresh_lineage(principal_store):
    document = _add_restaurant(principal_store)
    session = await session_service.login(
        PrincipalKind.RESTAURANT,
        LoginRequest(username="tasty", password="secret123"),
        Response(),
    )

    await session_service.change_password(
        PrincipalKind.RESTAURANT,
        str(document["_id"]),
        ChangePasswordRequest(oldPassword="secret123", newPassword="fresh-secret"),
    )

    stored = principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])
    assert check_password("fresh-secret", stored["password"])
    assert "refreshToken" not in stored
    with pytest.raises(AppException):
        await session_service.refresh(PrincipalKind.RESTAURANT, session["refreshToken"], Response())


@pytest.mark.asyncio
async def test_change_password_with_wrong_old_password_keeps_hash(principal_store):
    document = _add_restaurant(principal_store)
    before = principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])["password"]

    with pytest.raises(AppException) as exc_info:
        await session_service.change_password(
            PrincipalKind.RESTAURANT,
            str(document["_id"]),
            ChangePasswordRequest(oldPassword="not-it", newPassword="fresh-secret"),
        )

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["message"] == "Invalid old password"
    assert principal_store.stored(PrincipalKind.RESTAURANT, document["_id"])["password"] == before
