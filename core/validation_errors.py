from __future__ import annotations

from typing import Any, Iterable


_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}
_SENSITIVE_FIELDS = {"password", "oldPassword", "newPassword", "refreshToken", "accessToken"}


def _split_location(loc: Any) -> tuple[str, list[str]]:
    if loc is None:
        return "body", []
    if not isinstance(loc, (list, tuple)):
        loc = [loc]
    parts = [str(part) for part in loc]
    if parts and parts[0] in _REQUEST_LOCATIONS:
        return parts[0], parts[1:]
    return "body", parts


def _is_sensitive(path_parts: Iterable[str]) -> bool:
    return any(part in _SENSITIVE_FIELDS for part in path_parts)


def validation_summary(missing_fields: list[str], invalid_count: int) -> str:
    if missing_fields:
        return f"Validation failed: missing required {'field' if len(missing_fields) == 1 else 'fields'}: {', '.join(missing_fields)}."
    return f"Validation failed for {invalid_count} {'field' if invalid_count == 1 else 'fields'}."


def format_validation_error_details(errors: list[dict[str, Any]]) -> dict[str, Any]:
    """Flatten pydantic errors into the ``details`` block of a 400 response.

    Submitted values are echoed back except for credential fields.
    """
    field_errors: list[dict[str, Any]] = []
    missing_fields: list[str] = []

    for error in errors:
        location, path_parts = _split_location(error.get("loc"))
        path = ".".join(path_parts) or "(root)"
        error_type = str(error.get("type", "validation_error"))

        entry: dict[str, Any] = {
            "path": path,
            "location": location,
            "message": str(error.get("msg", "Invalid value")),
            "errorType": error_type,
        }
        if error_type != "missing" and not _is_sensitive(path_parts) and "input" in error:
            entry["input"] = error["input"]
        field_errors.append(entry)

        if error_type == "missing" and path not in missing_fields:
            missing_fields.append(path)

    return {
        "summary": validation_summary(missing_fields, len(field_errors)),
        "missingFields": missing_fields,
        "fieldErrors": field_errors,
    }
