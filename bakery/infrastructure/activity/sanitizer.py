"""Redaction helpers applied to activity payloads before they leave the process.

Only top-level keys are inspected. Nested mappings and lists are copied by
reference and keep whatever they contain, so callers must not put secrets
below the first level of ``details``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Final

REDACTED: Final[str] = "[REDACTED]"

SENSITIVE_FIELDS: Final[tuple[str, ...]] = (
    "password",
    "token",
    "secret",
    "key",
    "authorization",
    "ssn",
    "creditcard",
)


def is_sensitive_field(field_name: str) -> bool:
    """Return ``True`` when ``field_name`` contains a sensitive fragment."""

    lowered = str(field_name).lower()
    return any(fragment in lowered for fragment in SENSITIVE_FIELDS)


def sanitize_details(details: Any) -> Any:
    """Return a shallow copy of ``details`` with sensitive keys redacted.

    Values that are not mappings are returned unchanged.
    """

    if not isinstance(details, Mapping):
        return details

    return {
        key: REDACTED if is_sensitive_field(key) else value
        for key, value in details.items()
    }


def to_json_compatible(value: Any) -> Any:
    """Return ``value`` as plain JSON data, stringifying what JSON cannot hold.

    Unknown value types become their ``str()``. When the structure itself
    cannot be encoded (non-string keys, circular references) the whole value
    is replaced by its ``str()``.
    """

    if value is None:
        return None
    try:
        return json.loads(json.dumps(value, default=str))
    except (TypeError, ValueError):
        return str(value)


def sanitize_form_data(form_data: Any) -> dict[str, Any] | None:
    """Flatten and redact submitted form fields.

    Multi-value containers such as Starlette's ``FormData`` keep the last
    value submitted for each field.
    """

    if not form_data:
        return None

    if hasattr(form_data, "multi_items"):
        flattened: dict[str, Any] = {}
        for key, value in form_data.multi_items():
            flattened[key] = value
        form_data = flattened

    sanitized = sanitize_details(form_data)
    if not isinstance(sanitized, dict):
        return None
    return sanitized


__all__ = [
    "REDACTED",
    "SENSITIVE_FIELDS",
    "is_sensitive_field",
    "sanitize_details",
    "sanitize_form_data",
    "to_json_compatible",
]
