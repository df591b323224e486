from __future__ import annotations

from dataclasses import dataclass

from core.settings import TokenSettings, get_settings
from security.principal import PrincipalKind


@dataclass(frozen=True)
class KindConfig:
    kind: PrincipalKind
    label: str
    collection: str
    tokens: TokenSettings
    login_fields: tuple[str, ...]


_KIND_LAYOUT: dict[PrincipalKind, tuple[str, str, tuple[str, ...]]] = {
    PrincipalKind.SUPER_ADMIN: ("Super admin", "super_admins", ("username",)),
    PrincipalKind.RESTAURANT: ("Restaurant", "restaurants", ("username", "phoneNumber")),
    PrincipalKind.WORKER: ("Worker", "workers", ("username", "phoneNumber")),
}


def get_kind_config(kind: PrincipalKind | str) -> KindConfig:
    kind = PrincipalKind(kind)
    settings = get_settings()
    tokens = {
        PrincipalKind.SUPER_ADMIN: settings.super_admin_tokens,
        PrincipalKind.RESTAURANT: settings.restaurant_tokens,
        PrincipalKind.WORKER: settings.worker_tokens,
    }[kind]
    label, collection, login_fields = _KIND_LAYOUT[kind]
    return KindConfig(
        kind=kind,
        label=label,
        collection=collection,
        tokens=tokens,
        login_fields=login_fields,
    )
