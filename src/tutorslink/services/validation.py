"""
tutorslink.services.validation

Payload helpers shared by callables and the sync webhook.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from tutorslink.errors import InvalidArgument, NotFound


def require_mapping(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request data must be an object.")
    return data


def clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def optional_str(value: Any) -> str | None:
    return clean_str(value) or None


def first_text(*values: Any) -> str | None:
    # First candidate that is non-empty after trimming.
    for value in values:
        text = clean_str(value)
        if text:
            return text
    return None


def require_fields(data: dict[str, Any], fields: Iterable[str]) -> None:
    for name in fields:
        if not clean_str(data.get(name)):
            raise InvalidArgument(f"Missing required field: {name}")


def parse_id(value: Any, *, what: str) -> uuid.UUID:
    # An id that can't be parsed can't name an existing document.
    try:
        return uuid.UUID(clean_str(value))
    except ValueError as e:
        raise NotFound(f"{what} not found.") from e


def check_length(value: str | None, *, name: str, max_length: int) -> str | None:
    # Identifiers and contact fields are rejected rather than truncated.
    if value is not None and len(value) > max_length:
        raise InvalidArgument(f"{name} must be at most {max_length} characters.")
    return value
