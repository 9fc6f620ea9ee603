"""Flatten request payloads into form-urlencoded bodies."""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any
from urllib.parse import urlencode

from .exceptions import PayloadEncodingError


def _default(obj: Any) -> Any:
    """JSON fallback for dataclasses, enums and plain objects."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, enum.Enum):
        return obj.value
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise PayloadEncodingError(f"Cannot serialize {type(obj).__name__} as request content")


def _to_form_value(key: str, value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise PayloadEncodingError(
            f"Nested value for {key!r} cannot be sent as a form field"
        )
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)  # numbers, true/false


def to_form_fields(content: Any) -> dict[str, str]:
    """Convert a payload into a flat, lower-cased ``str -> str`` mapping.

    The payload goes through its JSON representation and the whole text is
    lower-cased, keys and values alike.

    Raises:
        PayloadEncodingError: If the payload is not an object or has nested
            objects or arrays.
    """
    serialized = json.dumps(content, default=_default, ensure_ascii=False).lower()
    data = json.loads(serialized)
    if not isinstance(data, dict):
        raise PayloadEncodingError(
            f"Request content must serialize to an object, not {type(data).__name__}"
        )
    return {key: _to_form_value(key, value) for key, value in data.items()}


def encode_form(fields: dict[str, str]) -> bytes:
    """Encode a flat mapping as an ``application/x-www-form-urlencoded`` body."""
    return urlencode(fields).encode("ascii")
