"""
Contract extraction - turns a router of typed operations into a ContractDefinition.

Every operation's input and output schema is converted into a fully expanded
TypeReference tree. Named types (shared ``$ref`` components, titled schemas,
endpoint payloads and synthesized inline objects) are also registered, once
and parent first, in ``ContractDefinition.types``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping

from ..shared.errors import (
    ExtractionError,
    InvalidOperationError,
    RouterNotFoundError,
    UnclassifiableSchemaError,
)
from ..shared.naming import to_pascal_case
from .model import (
    OPERATION_TYPES,
    WRAPPER_KINDS,
    ContractDefinition,
    Endpoint,
    EndpointGroup,
    MiddlewareDefinition,
    OperationType,
    Property,
    Router,
    TypeKind,
    TypeReference,
    ValidationRules,
    is_type_kind,
)
from .router import OperationDefinition, RouterDefinition, create_router
from .schema import JsonSchemaNode, SchemaNode
from .traversal import element_path, key_path, member_path, property_path, value_path

logger = logging.getLogger(__name__)

# Kinds whose schema constraints are read into ValidationRules
CONSTRAINED_KINDS = frozenset({"primitive", "array"})


def _strip_validation(type_ref: TypeReference) -> TypeReference:
    """Copy a wrapper chain with the innermost validation removed."""
    if type_ref.kind in WRAPPER_KINDS and isinstance(type_ref.base_type, TypeReference):
        return replace(type_ref, base_type=_strip_validation(type_ref.base_type))
    return replace(type_ref, validation=None)


def _middleware_name(entry: Any, index: int) -> str:
    if isinstance(entry, str) and entry:
        return entry
    name = getattr(entry, "__name__", None)
    if isinstance(name, str) and name and name != "<lambda>":
        return name
    return f"middleware_{index}"


class ContractExtractor:
    """Converts one router into a ContractDefinition.

    An instance keeps per-run naming state; ``extract`` resets it, so an
    extractor can be reused for several routers in sequence.
    """

    def __init__(self) -> None:
        self._reset({})

    def _reset(self, components: Mapping[str, Any]) -> None:
        self._components = components
        self._types: dict[str, TypeReference | None] = {}
        self._claimed: set[str] = set(components)
        self._by_reference: dict[str, TypeReference] = {}
        self._resolving: set[str] = set()

    def extract(self, router: RouterDefinition | Mapping[str, Any]) -> ContractDefinition:
        """Extract a contract.

        Raises:
            RouterNotFoundError: If there are no endpoint groups.
            InvalidOperationError: If an operation is malformed.
            UnclassifiableSchemaError: If a schema matches no type kind.
            ExtractionError: For any other structural problem, such as a
                recursive ``$ref``.
        """
        definition = router if isinstance(router, RouterDefinition) else create_router(router)
        self._reset(definition.components)

        if not definition.groups:
            raise RouterNotFoundError("Router has no endpoint groups", definition.name)

        groups: list[EndpointGroup] = []
        endpoints: list[Endpoint] = []
        for group_name, operations in definition.groups.items():
            if not isinstance(operations, Mapping):
                raise ExtractionError(
                    f"Endpoint group must be a mapping of operations, got {type(operations).__name__}",
                    str(group_name),
                )
            if not operations:
                raise ExtractionError("Endpoint group has no operations", str(group_name))

            group_endpoints = [
                self._extract_endpoint(str(group_name), str(op_name), operation)
                for op_name, operation in operations.items()
            ]
            groups.append(EndpointGroup(name=str(group_name), endpoints=tuple(group_endpoints)))
            endpoints.extend(group_endpoints)

        middleware = tuple(
            MiddlewareDefinition(_middleware_name(entry, index))
            for index, entry in enumerate(definition.middleware)
        )
        types = tuple(t for t in self._types.values() if t is not None)
        logger.debug(
            "Extracted %d endpoints and %d named types from %s",
            len(endpoints),
            len(types),
            definition.name,
        )

        return ContractDefinition(
            routers=(Router(definition.name, tuple(groups), middleware),),
            types=types,
            endpoints=tuple(endpoints),
            middleware=middleware,
        )

    def _extract_endpoint(self, group: str, name: str, operation: Any) -> Endpoint:
        full_name = f"{group}.{name}"
        op_type, input_schema, output_schema = self._read_operation(operation, full_name)
        stem = to_pascal_case(group) + to_pascal_case(name)

        return Endpoint(
            name=name,
            type=op_type,
            input=self._convert_root(input_schema, f"{full_name}.input", f"{stem}Input"),
            output=self._convert_root(output_schema, f"{full_name}.output", f"{stem}Output"),
            full_name=full_name,
        )

    @staticmethod
    def _read_operation(operation: Any, full_name: str) -> tuple[OperationType, Any, Any]:
        if isinstance(operation, OperationDefinition):
            op_type, input_schema, output_schema = operation.type, operation.input, operation.output
        elif isinstance(operation, Mapping):
            op_type = operation.get("type")
            input_schema = operation.get("input")
            output_schema = operation.get("output")
        else:
            raise InvalidOperationError(
                f"Operation must be a mapping with type, input and output, got {type(operation).__name__}",
                full_name,
            )

        if op_type is None:
            raise InvalidOperationError(
                "Missing operation type tag; expected 'query' or 'mutation'", full_name, "type"
            )
        if not isinstance(op_type, str) or op_type not in OPERATION_TYPES:
            raise InvalidOperationError(
                f"Unknown operation type {op_type!r}; expected 'query' or 'mutation'",
                full_name,
                "type",
            )
        if input_schema is None:
            raise InvalidOperationError("Missing schema", full_name, "input")
        if output_schema is None:
            raise InvalidOperationError("Missing schema", full_name, "output")

        return op_type, input_schema, output_schema  # type: ignore[return-value]

    def _node(self, schema: Any, path: str) -> SchemaNode:
        if isinstance(schema, JsonSchemaNode):
            return schema
        if isinstance(schema, Mapping):
            return JsonSchemaNode(schema, self._components)
        if isinstance(schema, SchemaNode):
            return schema
        raise UnclassifiableSchemaError(f"expected a schema, got {type(schema).__name__}", path)

    def _convert_root(self, schema: Any, path: str, root_name: str) -> TypeReference:
        return self._convert(self._node(schema, path), path, root_name, root_name=root_name)

    @staticmethod
    def _classify(node: SchemaNode, path: str) -> TypeKind:
        try:
            kind = node.classify()
        except UnclassifiableSchemaError as e:
            if e.path:
                raise
            raise UnclassifiableSchemaError(e.detail, path) from e
        if not is_type_kind(kind):
            raise UnclassifiableSchemaError(f"unknown kind {kind!r}", path)
        return kind

    def _claim(self, name: str) -> str:
        """Reserve ``name``, or the first free ``name2``, ``name3``, ..."""
        candidate = name
        suffix = 2
        while candidate in self._claimed:
            candidate = f"{name}{suffix}"
            suffix += 1
        self._claimed.add(candidate)
        return candidate

    def _convert(
        self,
        node: SchemaNode,
        path: str,
        hint: str,
        *,
        root_name: str | None = None,
        name: str | None = None,
    ) -> TypeReference:
        kind = self._classify(node, path)

        if kind == "optional":
            inner = self._convert(node.unwrap(), path, hint, root_name=root_name, name=name)
            return TypeReference(kind="optional", base_type=inner)

        reference = node.reference
        if reference is None:
            return self._build(node, kind, path, hint, root_name=root_name, name=name)

        if reference in self._by_reference:
            return self._by_reference[reference]
        if reference in self._resolving:
            raise ExtractionError(f"Recursive reference to '{reference}' is not supported", path)

        self._resolving.add(reference)
        try:
            result = self._build(node, kind, path, reference, name=reference)
        finally:
            self._resolving.discard(reference)
        self._by_reference[reference] = result
        return result

    def _build(
        self,
        node: SchemaNode,
        kind: TypeKind,
        path: str,
        hint: str,
        *,
        root_name: str | None = None,
        name: str | None = None,
    ) -> TypeReference:
        if kind == "nullable":
            inner = self._convert(node.unwrap(), path, hint, root_name=root_name, name=name)
            return TypeReference(kind="nullable", base_type=inner)

        if name is None:
            if node.title:
                name = self._claim(node.title)
            elif kind == "object":
                name = self._claim(root_name or hint)
        if name is not None:
            # Parent slot first so types list parents before children
            self._types.setdefault(name, None)
            hint = name

        validation = node.constraints() if kind in CONSTRAINED_KINDS else None
        result = self._build_shape(node, kind, path, hint, name, validation)

        if name is not None:
            self._types[name] = result
        return result

    def _build_shape(
        self,
        node: SchemaNode,
        kind: TypeKind,
        path: str,
        hint: str,
        name: str | None,
        validation: ValidationRules | None,
    ) -> TypeReference:
        if kind == "object":
            return TypeReference(
                kind="object",
                name=name,
                properties=tuple(self._properties(node, path, hint)),
            )

        if kind == "array":
            element_hint = hint if hint.endswith("Item") else f"{hint}Item"
            element = self._convert(node.element(), element_path(path), element_hint)
            return TypeReference(kind="array", name=name, element_type=element, validation=validation)

        if kind == "union":
            members = tuple(
                self._convert(member, member_path(path, index), f"{hint}Variant{index}")
                for index, member in enumerate(node.members())
            )
            if not members:
                raise UnclassifiableSchemaError("union has no members", path)
            return TypeReference(kind="union", name=name, union_types=members)

        if kind == "tuple":
            elements = tuple(
                self._convert(member, member_path(path, index), f"{hint}Item{index}")
                for index, member in enumerate(node.members())
            )
            return TypeReference(kind="tuple", name=name, tuple_elements=elements)

        if kind == "record":
            key_node, value_node = node.entries()
            return TypeReference(
                kind="record",
                name=name,
                key_type=self._convert(key_node, key_path(path), f"{hint}Key"),
                value_type=self._convert(value_node, value_path(path), f"{hint}Value"),
            )

        if kind == "enum":
            return TypeReference(kind="enum", name=name, enum_values=tuple(node.values()))

        if kind == "literal":
            return TypeReference(kind="literal", name=name, literal_value=node.literal())

        if kind == "date":
            return TypeReference(kind="date", name=name)

        return TypeReference(
            kind="primitive",
            name=name,
            base_type=node.primitive(),
            validation=validation,
        )

    def _properties(self, node: SchemaNode, path: str, scope: str) -> Iterable[Property]:
        for field_name, child in node.fields():
            field_type = self._convert(
                child,
                property_path(path, field_name),
                scope + to_pascal_case(field_name),
            )
            validation = None
            innermost = field_type.unwrap()
            if innermost.kind == "primitive" and innermost.name is None and innermost.validation:
                validation = innermost.validation
                field_type = _strip_validation(field_type)

            yield Property(
                name=field_name,
                type=field_type,
                required=field_type.kind != "optional",
                validation=validation,
            )


def extract(router: RouterDefinition | Mapping[str, Any]) -> ContractDefinition:
    """Extract a ContractDefinition from a router (see ContractExtractor.extract)."""
    return ContractExtractor().extract(router)
