"""Identifier helpers shared by the extractor and the targets."""

from __future__ import annotations

import json
import re
from functools import lru_cache

_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_TS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Join the words of a group, operation or field name in PascalCase.

    Examples:
        >>> to_pascal_case("users")
        'Users'
        >>> to_pascal_case("created_at")
        'CreatedAt'
        >>> to_pascal_case("x-request-id")
        'XRequestId'
        >>> to_pascal_case("getUser")
        'GetUser'
    """
    words = _SEPARATORS.split(_WORD_BOUNDARY.sub(r"\1 \2", value))
    return "".join(word[0].upper() + word[1:].lower() for word in words if word)


@lru_cache(maxsize=1024)
def go_identifier(value: str) -> str:
    """Exported Go identifier for a type or struct field name."""
    name = to_pascal_case(value) or "Value"
    if name[0].isdigit():
        return f"V{name}"
    return name


@lru_cache(maxsize=1024)
def ts_property_key(value: str) -> str:
    """Quote a property key for a TypeScript interface when it isn't an identifier."""
    if _TS_IDENTIFIER.match(value):
        return value
    return json.dumps(value)
