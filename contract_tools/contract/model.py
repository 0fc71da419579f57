"""
Contract IR - the normalized, serializable shape every target reads.

All values are frozen dataclasses with tuple-valued collections, so a
ContractDefinition produced by the extractor can be shared read-only by any
number of target generators.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Final, Iterator, Literal, Union

TypeKind = Literal[
    "object",
    "array",
    "primitive",
    "optional",
    "nullable",
    "union",
    "enum",
    "literal",
    "record",
    "tuple",
    "date",
]

ValidationKind = Literal[
    "minLength",
    "maxLength",
    "email",
    "url",
    "uuid",
    "regex",
    "min",
    "max",
    "int",
    "positive",
    "negative",
    "minItems",
    "maxItems",
]

OperationType = Literal["query", "mutation"]

TYPE_KINDS: Final[tuple[TypeKind, ...]] = (
    "object",
    "array",
    "primitive",
    "optional",
    "nullable",
    "union",
    "enum",
    "literal",
    "record",
    "tuple",
    "date",
)

# Kinds whose base_type holds the wrapped TypeReference
WRAPPER_KINDS: Final[frozenset[str]] = frozenset({"optional", "nullable"})

STRING_VALIDATIONS: Final[tuple[ValidationKind, ...]] = (
    "minLength",
    "maxLength",
    "email",
    "url",
    "uuid",
    "regex",
)
NUMBER_VALIDATIONS: Final[tuple[ValidationKind, ...]] = (
    "min",
    "max",
    "int",
    "positive",
    "negative",
)
ARRAY_VALIDATIONS: Final[tuple[ValidationKind, ...]] = ("minItems", "maxItems")

VALIDATION_KINDS: Final[tuple[ValidationKind, ...]] = (
    STRING_VALIDATIONS + NUMBER_VALIDATIONS + ARRAY_VALIDATIONS
)

OPERATION_TYPES: Final[frozenset[str]] = frozenset({"query", "mutation"})

# Python attribute name -> wire name for rules whose names differ
_RULE_ATTRIBUTES: Final[dict[ValidationKind, str]] = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "email": "email",
    "url": "url",
    "uuid": "uuid",
    "regex": "regex",
    "min": "min",
    "max": "max",
    "int": "int",
    "positive": "positive",
    "negative": "negative",
    "minItems": "min_items",
    "maxItems": "max_items",
}


def is_type_kind(value: object) -> bool:
    """Check whether a value is one of the 11 type kinds (case sensitive)."""
    return isinstance(value, str) and value in TYPE_KINDS


def is_validation_kind(value: object) -> bool:
    """Check whether a value names one of the 13 validation rules."""
    return isinstance(value, str) and value in VALIDATION_KINDS


def get_validations_for_type(base_type: str) -> tuple[ValidationKind, ...]:
    """Get the validation kinds that apply to a primitive base type or arrays."""
    if base_type == "string":
        return STRING_VALIDATIONS
    if base_type in ("number", "integer"):
        return NUMBER_VALIDATIONS
    if base_type == "array":
        return ARRAY_VALIDATIONS
    return ()


@dataclass(frozen=True, slots=True)
class ValidationRules:
    """Flat bag of constraints, partitioned by the kind of value they apply to."""

    # String validations
    min_length: int | None = None
    max_length: int | None = None
    email: bool | None = None
    url: bool | None = None
    uuid: bool | None = None
    regex: str | None = None
    # Number validations
    min: float | None = None
    max: float | None = None
    int: bool | None = None
    positive: bool | None = None
    negative: bool | None = None
    # Array validations
    min_items: int | None = None
    max_items: int | None = None

    def get(self, kind: ValidationKind) -> Any:
        return getattr(self, _RULE_ATTRIBUTES[kind])

    def items(self) -> Iterator[tuple[ValidationKind, Any]]:
        """Yield every rule that is set, in VALIDATION_KINDS order."""
        for kind in VALIDATION_KINDS:
            value = self.get(kind)
            if value is not None:
                yield kind, value

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))

    def to_dict(self) -> dict[str, Any]:
        return dict(self.items())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationRules:
        """Build rules from wire names, ignoring unknown keys."""
        return cls(**{
            _RULE_ATTRIBUTES[key]: value
            for key, value in data.items()
            if key in _RULE_ATTRIBUTES and value is not None
        })


@dataclass(frozen=True, slots=True)
class Property:
    """A named field of an object-kind TypeReference."""

    name: str
    type: TypeReference
    required: bool
    validation: ValidationRules | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type.to_dict(),
            "required": self.required,
        }
        if self.validation:
            data["validation"] = self.validation.to_dict()
        return data


@dataclass(frozen=True, slots=True)
class TypeReference:
    """A node in the recursive type-shape tree.

    Only the fields relevant to ``kind`` are populated: ``element_type`` for
    arrays, ``base_type`` for primitives (a tag string) and for
    optional/nullable (the wrapped TypeReference), and so on.
    """

    kind: TypeKind
    name: str | None = None
    validation: ValidationRules | None = None
    properties: tuple[Property, ...] | None = None
    element_type: TypeReference | None = None
    base_type: Union[str, TypeReference, None] = None
    union_types: tuple[TypeReference, ...] | None = None
    tuple_elements: tuple[TypeReference, ...] | None = None
    enum_values: tuple[str | float, ...] | None = None
    literal_value: str | float | bool | None = None
    key_type: TypeReference | None = None
    value_type: TypeReference | None = None

    def unwrap(self) -> TypeReference:
        """Strip every optional/nullable layer and return the inner reference."""
        current = self
        while current.kind in WRAPPER_KINDS and isinstance(current.base_type, TypeReference):
            current = current.base_type
        return current

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind}
        if self.name is not None:
            data["name"] = self.name
        if self.validation:
            data["validation"] = self.validation.to_dict()
        if self.properties is not None:
            data["properties"] = [prop.to_dict() for prop in self.properties]
        if self.element_type is not None:
            data["elementType"] = self.element_type.to_dict()
        if isinstance(self.base_type, TypeReference):
            data["baseType"] = self.base_type.to_dict()
        elif self.base_type is not None:
            data["baseType"] = self.base_type
        if self.union_types is not None:
            data["unionTypes"] = [t.to_dict() for t in self.union_types]
        if self.tuple_elements is not None:
            data["tupleElements"] = [t.to_dict() for t in self.tuple_elements]
        if self.enum_values is not None:
            data["enumValues"] = list(self.enum_values)
        if self.kind == "literal":
            data["literalValue"] = self.literal_value
        if self.key_type is not None:
            data["keyType"] = self.key_type.to_dict()
        if self.value_type is not None:
            data["valueType"] = self.value_type.to_dict()
        return data


# A named TypeReference registered in ContractDefinition.types
TypeDefinition = TypeReference


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A typed query or mutation, addressed as ``<group>.<name>``."""

    name: str
    type: OperationType
    input: TypeReference
    output: TypeReference
    full_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "input": self.input.to_dict(),
            "output": self.output.to_dict(),
            "fullName": self.full_name,
        }


@dataclass(frozen=True, slots=True)
class EndpointGroup:
    name: str
    endpoints: tuple[Endpoint, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "endpoints": [endpoint.full_name for endpoint in self.endpoints],
        }


@dataclass(frozen=True, slots=True)
class MiddlewareDefinition:
    """Middleware hook declared on a router; implemented by users in generated code."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True, slots=True)
class Router:
    name: str
    endpoint_groups: tuple[EndpointGroup, ...]
    middleware: tuple[MiddlewareDefinition, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "endpointGroups": [group.to_dict() for group in self.endpoint_groups],
        }
        if self.middleware:
            data["middleware"] = [m.to_dict() for m in self.middleware]
        return data


@dataclass(frozen=True, slots=True)
class ContractDefinition:
    """The extracted contract: routers, named types and endpoints."""

    routers: tuple[Router, ...]
    types: tuple[TypeDefinition, ...]
    endpoints: tuple[Endpoint, ...]
    middleware: tuple[MiddlewareDefinition, ...] = field(default=())

    def get_type(self, name: str) -> TypeDefinition | None:
        return next((t for t in self.types if t.name == name), None)

    def get_endpoint(self, full_name: str) -> Endpoint | None:
        return next((e for e in self.endpoints if e.full_name == full_name), None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "routers": [router.to_dict() for router in self.routers],
            "types": [t.to_dict() for t in self.types],
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
        }
        if self.middleware:
            data["middleware"] = [m.to_dict() for m in self.middleware]
        return data
