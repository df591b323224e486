from __future__ import annotations

import logging

from limits import RateLimitItem
from limits import parse as parse_rate

logger = logging.getLogger(__name__)

ANONYMOUS_BUCKET = "anonymous"

DEFAULT_KIND_RATES = {
    ANONYMOUS_BUCKET: "30/minute",
    "restaurant": "120/minute",
    "worker": "120/minute",
    "superAdmin": "200/minute",
}

_KIND_ALIASES = {
    "superadmin": "superAdmin",
    "super_admin": "superAdmin",
    "super-admin": "superAdmin",
    "restaurant": "restaurant",
    "worker": "worker",
    "anonymous": ANONYMOUS_BUCKET,
}


def normalize_bucket(kind: str | None) -> str:
    value = (kind or "").strip().lower()
    return _KIND_ALIASES.get(value, ANONYMOUS_BUCKET)


def parse_kind_rate_limits(raw: str | None) -> dict[str, str]:
    """Parse ``kind:rate`` pairs, e.g. ``anonymous:20/minute,worker:60/minute``."""
    parsed: dict[str, str] = {}
    if not raw:
        return parsed

    for entry in raw.split(","):
        value = entry.strip()
        if ":" not in value:
            continue
        kind, limit = value.split(":", 1)
        if kind.strip().lower() not in _KIND_ALIASES or not limit.strip():
            continue
        parsed[normalize_bucket(kind)] = limit.strip()

    return parsed


def build_kind_rate_limits(raw: str | None) -> dict[str, RateLimitItem]:
    selected = dict(DEFAULT_KIND_RATES)
    selected.update(parse_kind_rate_limits(raw))

    final_limits: dict[str, RateLimitItem] = {}
    for bucket, rule in selected.items():
        try:
            final_limits[bucket] = parse_rate(rule)
        except ValueError:
            logger.warning("ignoring invalid rate limit %r for %s", rule, bucket)
            final_limits[bucket] = parse_rate(DEFAULT_KIND_RATES[bucket])

    return final_limits
