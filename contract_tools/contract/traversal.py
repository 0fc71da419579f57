"""Depth-first walk over a TypeReference tree and the canonical path scheme."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .model import Property, TypeReference


def property_path(path: str, name: str) -> str:
    return f"{path}.{name}"


def element_path(path: str) -> str:
    return f"{path}[]"


def member_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def key_path(path: str) -> str:
    return f"{path}.key"


def value_path(path: str) -> str:
    return f"{path}.value"


@dataclass(frozen=True, slots=True)
class Visit:
    """One reachable TypeReference, where it sits, and the property holding it."""

    path: str
    type_ref: TypeReference
    property: Property | None = None


def walk(
    type_ref: TypeReference,
    path: str,
    prop: Property | None = None,
) -> Iterator[Visit]:
    """Yield every TypeReference reachable from ``type_ref`` exactly once.

    Order: the node itself, then properties, element type, wrapped base type
    (same path), union members, tuple elements, record key and record value.
    """
    yield Visit(path, type_ref, prop)

    for child in type_ref.properties or ():
        yield from walk(child.type, property_path(path, child.name), child)

    if type_ref.element_type is not None:
        yield from walk(type_ref.element_type, element_path(path))

    if isinstance(type_ref.base_type, TypeReference):
        yield from walk(type_ref.base_type, path)

    for index, member in enumerate(type_ref.union_types or ()):
        yield from walk(member, member_path(path, index))

    for index, element in enumerate(type_ref.tuple_elements or ()):
        yield from walk(element, member_path(path, index))

    if type_ref.key_type is not None:
        yield from walk(type_ref.key_type, key_path(path))

    if type_ref.value_type is not None:
        yield from walk(type_ref.value_type, value_path(path))
