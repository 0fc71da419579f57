"""Router authoring API: endpoint groups of typed query/mutation operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Union

from ..shared.errors import RouterNotFoundError
from .model import OperationType

Middleware = Union[str, Callable[..., Any]]

# Reserved key inside a router mapping that declares middleware, not a group
MIDDLEWARE_KEY = "middleware"


@dataclass(frozen=True, slots=True)
class OperationDefinition:
    """A single operation: its type tag plus input and output schemas."""

    type: OperationType
    input: Any
    output: Any


@dataclass(frozen=True, slots=True)
class RouterDefinition:
    """Endpoint groups plus explicitly declared middleware and shared schemas."""

    groups: Mapping[str, Mapping[str, Any]]
    middleware: tuple[Middleware, ...] = ()
    components: Mapping[str, Any] = field(default_factory=dict)
    name: str = "router"


def query(input: Any, output: Any) -> OperationDefinition:
    """Create a query operation (read, no server state change).

    Example:
        >>> get_user = query(
        ...     input={"type": "object", "properties": {"id": {"type": "string"}}},
        ...     output={"$ref": "#/components/schemas/User"},
        ... )
    """
    return OperationDefinition(type="query", input=input, output=output)


def mutation(input: Any, output: Any) -> OperationDefinition:
    """Create a mutation operation (write)."""
    return OperationDefinition(type="mutation", input=input, output=output)


def create_router(
    groups: Mapping[str, Any],
    *,
    middleware: Iterable[Middleware] = (),
    components: Mapping[str, Any] | None = None,
    name: str = "router",
) -> RouterDefinition:
    """Create a router from a mapping of group name to operations.

    A ``middleware`` entry inside ``groups`` is accepted as well and is moved
    to the explicit middleware field.
    """
    if not isinstance(groups, Mapping):
        raise RouterNotFoundError(
            f"Router groups must be a mapping, got {type(groups).__name__}"
        )

    declared = list(middleware)
    endpoint_groups: dict[str, Mapping[str, Any]] = {}
    for key, value in groups.items():
        if key == MIDDLEWARE_KEY and isinstance(value, (list, tuple)):
            declared.extend(value)
            continue
        endpoint_groups[key] = value

    return RouterDefinition(
        groups=endpoint_groups,
        middleware=tuple(declared),
        components=dict(components or {}),
        name=name,
    )


def router_from_document(
    document: Mapping[str, Any],
    source: str | None = None,
) -> RouterDefinition:
    """Build a router from a loaded contract document.

    The document must have a ``router`` mapping; ``components.schemas`` holds
    the targets of local ``$ref`` pointers.

    Raises:
        RouterNotFoundError: If the document has no router mapping.
    """
    raw_router = document.get("router")
    if not isinstance(raw_router, Mapping):
        if "router" in document:
            raise RouterNotFoundError(
                "The 'router' entry exists but is not a mapping of endpoint groups",
                source,
            )
        candidates = [key for key in document if "router" in str(key).lower()]
        if candidates:
            raise RouterNotFoundError(
                f"No 'router' entry found. Found: {', '.join(map(str, candidates))}. "
                "Did you mean to name one of these 'router'?",
                source,
            )
        found = ", ".join(map(str, document)) or "none"
        raise RouterNotFoundError(
            f"No 'router' entry found (top-level keys: {found})",
            source,
        )

    components = document.get("components") or {}
    schemas = components.get("schemas") if isinstance(components, Mapping) else None

    return create_router(
        raw_router,
        components=schemas if isinstance(schemas, Mapping) else {},
    )
