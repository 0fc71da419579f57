"""
Schema introspection - the narrow interface the extractor reads schemas through.

``SchemaNode`` is the capability protocol; ``JsonSchemaNode`` implements it
for JSON Schema / OpenAPI mappings, resolving local ``$ref`` pointers against
the router's components.
"""

from __future__ import annotations

from typing import Any, Final, Mapping, Protocol, runtime_checkable

from ..shared.errors import UnclassifiableSchemaError
from .model import TypeKind, ValidationRules

# JavaScript safe-integer bounds. Some schema producers emit these in place of
# the declared bounds once an integer constraint is applied.
SAFE_INTEGER_MAX: Final[int] = 2**53 - 1
SAFE_INTEGER_MIN: Final[int] = -(2**53 - 1)

REF_PREFIXES: Final[tuple[str, ...]] = (
    "#/components/schemas/",
    "#/$defs/",
    "#/definitions/",
)

DATE_FORMATS: Final[frozenset[str]] = frozenset({"date", "date-time"})
NUMERIC_TYPES: Final[frozenset[str]] = frozenset({"number", "integer"})
UNION_KEYS: Final[tuple[str, ...]] = ("oneOf", "anyOf")

_FORMAT_RULES: Final[dict[str, str]] = {
    "email": "email",
    "uri": "url",
    "url": "url",
    "uuid": "uuid",
}


@runtime_checkable
class SchemaNode(Protocol):
    """What the extractor needs to know about a schema, whatever backs it."""

    @property
    def reference(self) -> str | None:
        """Name of the shared definition this node resolved from, if any."""

    @property
    def title(self) -> str | None: ...

    def classify(self) -> TypeKind: ...

    def primitive(self) -> str: ...

    def fields(self) -> list[tuple[str, SchemaNode]]:
        """Object fields in declaration order; optional fields come back optional-wrapped."""

    def element(self) -> SchemaNode: ...

    def members(self) -> list[SchemaNode]:
        """Union branches or tuple elements, in order."""

    def entries(self) -> tuple[SchemaNode, SchemaNode]:
        """Record key and value schemas."""

    def unwrap(self) -> SchemaNode:
        """The schema inside an optional or nullable wrapper."""

    def values(self) -> list[str | float]: ...

    def literal(self) -> str | float | bool: ...

    def constraints(self) -> ValidationRules | None: ...


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_null_schema(schema: Any) -> bool:
    return isinstance(schema, Mapping) and schema.get("type") == "null"


def _ref_name(ref: Any) -> str | None:
    if not isinstance(ref, str):
        return None
    for prefix in REF_PREFIXES:
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return None


def _split_nullable(schema: Mapping[str, Any]) -> dict[str, Any] | None:
    """Return the non-null remainder of a nullable schema, or None if not nullable.

    Every null marker (``nullable``, a ``"null"`` type, a ``None`` enum value,
    a null union branch) is removed at once, so one schema yields one wrapper.
    """
    rest = dict(schema)
    nullable = False

    if rest.get("nullable") is True:
        del rest["nullable"]
        nullable = True

    type_value = rest.get("type")
    if isinstance(type_value, list) and "null" in type_value:
        types = [t for t in type_value if t != "null"]
        if types:
            rest["type"] = types[0] if len(types) == 1 else types
            nullable = True

    enum_values = rest.get("enum")
    if isinstance(enum_values, list) and None in enum_values:
        values = [v for v in enum_values if v is not None]
        if values:
            rest["enum"] = values
            nullable = True

    for key in UNION_KEYS:
        branches = rest.get(key)
        if isinstance(branches, list) and any(_is_null_schema(b) for b in branches):
            kept = [b for b in branches if not _is_null_schema(b)]
            if not kept:
                continue
            del rest[key]
            if len(kept) == 1 and isinstance(kept[0], Mapping):
                rest.update(kept[0])
            else:
                rest[key] = kept
            nullable = True

    return rest if nullable else None


def _properties(schema: Mapping[str, Any]) -> Mapping[str, Any]:
    properties = schema.get("properties")
    if properties is None:
        return {}
    if not isinstance(properties, Mapping):
        raise UnclassifiableSchemaError(
            f"'properties' must be a mapping, got {type(properties).__name__}"
        )
    return properties


def _required(schema: Mapping[str, Any]) -> list[str]:
    required = schema.get("required")
    if required is None:
        return []
    if not isinstance(required, list) or not all(isinstance(name, str) for name in required):
        raise UnclassifiableSchemaError(
            f"'required' must be a list of property names, got {required!r}"
        )
    return required


def _tuple_items(schema: Mapping[str, Any]) -> list[Any]:
    key = "prefixItems" if "prefixItems" in schema else "items"
    items = schema.get(key)
    if not isinstance(items, list):
        raise UnclassifiableSchemaError(f"'{key}' must be a list, got {type(items).__name__}")
    return items


def _describe(schema: Any) -> str:
    if not isinstance(schema, Mapping):
        return f"expected a mapping, got {type(schema).__name__}"
    if "type" in schema:
        return f"unsupported type {schema['type']!r}"
    if not schema:
        return "empty schema"
    return f"no recognizable shape (keys: {', '.join(map(str, schema))})"


class JsonSchemaNode:
    """SchemaNode over a JSON Schema / OpenAPI mapping.

    ``$ref`` resolution is deferred until the node is first inspected, so an
    unresolvable pointer is reported at the location that uses it.
    """

    __slots__ = ("_raw", "_components", "_optional", "_resolved", "_reference")

    def __init__(
        self,
        schema: Any,
        components: Mapping[str, Any] | None = None,
        *,
        optional: bool = False,
    ) -> None:
        self._raw = schema
        self._components = components or {}
        self._optional = optional
        self._resolved: Any = None
        self._reference: str | None = None

    def __repr__(self) -> str:
        flag = ", optional=True" if self._optional else ""
        return f"JsonSchemaNode({self._raw!r}{flag})"

    def _child(self, schema: Any, *, optional: bool = False) -> JsonSchemaNode:
        return JsonSchemaNode(schema, self._components, optional=optional)

    @property
    def schema(self) -> Any:
        """The schema with any ``$ref`` chain resolved and ``allOf`` parts merged."""
        if self._resolved is None:
            name, schema, seen = self._follow_refs(self._raw, frozenset())
            if isinstance(schema, Mapping) and "allOf" in schema:
                schema = self._merge_all_of(schema, seen)
            self._reference = name
            self._resolved = schema
        return self._resolved

    def _follow_refs(
        self,
        schema: Any,
        seen: frozenset[str],
    ) -> tuple[str | None, Any, frozenset[str]]:
        name = None
        while isinstance(schema, Mapping) and "$ref" in schema:
            ref = schema["$ref"]
            name = _ref_name(ref)
            if name is None or name not in self._components:
                raise UnclassifiableSchemaError(f"unresolvable $ref {ref!r}")
            if name in seen:
                raise UnclassifiableSchemaError(f"$ref cycle through {name!r}")
            seen = seen | {name}
            schema = self._components[name]
        return name, schema, seen

    def _merge_all_of(self, schema: Mapping[str, Any], seen: frozenset[str]) -> dict[str, Any]:
        """Merge object-only ``allOf`` parts; later parts override earlier properties."""
        parts = schema["allOf"]
        if not isinstance(parts, list) or not parts:
            raise UnclassifiableSchemaError("allOf must be a non-empty list")

        merged = {k: v for k, v in schema.items() if k != "allOf"}
        properties = dict(_properties(merged))
        required = list(_required(merged))
        for part in parts:
            _, part, part_seen = self._follow_refs(part, seen)
            if isinstance(part, Mapping) and "allOf" in part:
                part = self._merge_all_of(part, part_seen)
            if not isinstance(part, Mapping) or not (
                part.get("type") == "object" or "properties" in part
            ):
                raise UnclassifiableSchemaError("allOf parts must be object schemas")
            properties.update(_properties(part))
            required.extend(name for name in _required(part) if name not in required)

        merged.update(type="object", properties=properties, required=required)
        return merged

    @property
    def reference(self) -> str | None:
        self.schema
        return self._reference

    @property
    def title(self) -> str | None:
        schema = self.schema
        title = schema.get("title") if isinstance(schema, Mapping) else None
        return title if isinstance(title, str) and title else None

    def classify(self) -> TypeKind:
        if self._optional:
            return "optional"

        schema = self.schema
        if not isinstance(schema, Mapping):
            raise UnclassifiableSchemaError(_describe(schema))
        if _split_nullable(schema) is not None:
            return "nullable"
        if "const" in schema:
            self.literal()
            return "literal"
        if "enum" in schema:
            self.values()
            return "enum"
        if any(isinstance(schema.get(key), list) for key in UNION_KEYS):
            return "union"

        type_value = schema.get("type")
        if isinstance(type_value, list):
            if len(type_value) > 1:
                return "union"
            type_value = type_value[0] if type_value else None

        if type_value == "array" or (
            type_value is None and ("items" in schema or "prefixItems" in schema)
        ):
            if "prefixItems" in schema or isinstance(schema.get("items"), list):
                _tuple_items(schema)
                return "tuple"
            return "array"

        if type_value == "object" or (type_value is None and "properties" in schema):
            properties = _properties(schema)
            _required(schema)
            if isinstance(schema.get("additionalProperties"), Mapping) and not properties:
                return "record"
            return "object"

        if type_value == "string":
            return "date" if schema.get("format") in DATE_FORMATS else "primitive"
        if type_value in NUMERIC_TYPES or type_value == "boolean":
            return "primitive"

        raise UnclassifiableSchemaError(_describe(schema))

    def _type(self) -> Any:
        type_value = self.schema.get("type")
        if isinstance(type_value, list) and len(type_value) == 1:
            return type_value[0]
        return type_value

    def primitive(self) -> str:
        return str(self._type())

    def fields(self) -> list[tuple[str, SchemaNode]]:
        schema = self.schema
        required = set(_required(schema))
        properties = _properties(schema)
        return [
            (str(name), self._child(child, optional=name not in required))
            for name, child in properties.items()
        ]

    def element(self) -> SchemaNode:
        return self._child(self.schema.get("items", {}))

    def members(self) -> list[SchemaNode]:
        schema = self.schema
        if "prefixItems" in schema or isinstance(schema.get("items"), list):
            return [self._child(item) for item in _tuple_items(schema)]
        for key in UNION_KEYS:
            if isinstance(schema.get(key), list):
                return [self._child(branch) for branch in schema[key]]
        type_value = schema.get("type")
        if isinstance(type_value, list):
            return [self._child({**schema, "type": t}) for t in type_value]
        return []

    def entries(self) -> tuple[SchemaNode, SchemaNode]:
        schema = self.schema
        key_schema = schema.get("propertyNames") or {"type": "string"}
        return self._child(key_schema), self._child(schema["additionalProperties"])

    def unwrap(self) -> SchemaNode:
        if self._optional:
            return self._child(self._raw)
        rest = _split_nullable(self.schema)
        if rest is None:
            raise UnclassifiableSchemaError("schema is neither optional nor nullable")
        return self._child(rest)

    def values(self) -> list[str | float]:
        values = self.schema.get("enum")
        if not isinstance(values, list) or not values:
            raise UnclassifiableSchemaError("enum must be a non-empty list")
        for value in values:
            if not (isinstance(value, str) or _is_number(value)):
                raise UnclassifiableSchemaError(
                    f"enum values must be strings or numbers, got {value!r}"
                )
        return list(values)

    def literal(self) -> str | float | bool:
        value = self.schema.get("const")
        if not isinstance(value, (str, int, float, bool)):
            raise UnclassifiableSchemaError(
                f"const must be a string, number or boolean, got {value!r}"
            )
        return value

    def constraints(self) -> ValidationRules | None:
        schema = self.schema
        type_value = self._type()
        rules: dict[str, Any] = {}

        if type_value == "string":
            if _is_number(schema.get("minLength")):
                rules["min_length"] = schema["minLength"]
            if _is_number(schema.get("maxLength")):
                rules["max_length"] = schema["maxLength"]
            rule = _FORMAT_RULES.get(schema.get("format"))
            if rule:
                rules[rule] = True
            if isinstance(schema.get("pattern"), str):
                rules["regex"] = schema["pattern"]

        elif type_value in NUMERIC_TYPES:
            is_integer = type_value == "integer"
            minimum = schema.get("minimum")
            maximum = schema.get("maximum")
            exclusive_min = schema.get("exclusiveMinimum")
            exclusive_max = schema.get("exclusiveMaximum")

            # OpenAPI 3.0 spells "> 0" as a boolean flag next to the bound
            if exclusive_min is True and _is_number(minimum) and minimum == 0:
                rules["positive"] = True
                minimum = None
            elif _is_number(exclusive_min) and exclusive_min == 0:
                rules["positive"] = True
            if exclusive_max is True and _is_number(maximum) and maximum == 0:
                rules["negative"] = True
                maximum = None
            elif _is_number(exclusive_max) and exclusive_max == 0:
                rules["negative"] = True

            if _is_number(minimum) and not (is_integer and minimum == SAFE_INTEGER_MIN):
                rules["min"] = minimum
            if _is_number(maximum) and not (is_integer and maximum == SAFE_INTEGER_MAX):
                rules["max"] = maximum
            if is_integer:
                rules["int"] = True

        elif type_value == "array":
            if _is_number(schema.get("minItems")):
                rules["min_items"] = schema["minItems"]
            if _is_number(schema.get("maxItems")):
                rules["max_items"] = schema["maxItems"]

        return ValidationRules(**rules) if rules else None
