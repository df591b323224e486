from __future__ import annotations

from typing import Any, Mapping

from core.errors import auth_account_inactive, auth_permission_denied
from security.kinds import get_kind_config
from security.principal import PrincipalKind, StaffPrincipal


def is_account_active(document: Mapping[str, Any]) -> bool:
    # records written before the flag existed count as active
    return document.get("status", True) is not False


def ensure_account_active(kind: PrincipalKind, document: Mapping[str, Any]) -> None:
    if not is_account_active(document):
        raise auth_account_inactive(get_kind_config(kind).label)


def ensure_same_restaurant(principal: StaffPrincipal, restro_id: Any, *, resource: str = "resource") -> None:
    """Reject staff acting on another restaurant's records with a 403."""
    if restro_id is None or str(restro_id) != principal.restro_id:
        raise auth_permission_denied(message=f"You are not allowed to modify this {resource}")
