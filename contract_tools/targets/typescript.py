"""TypeScript types target - interfaces, aliases and an endpoint map in ``types.ts``."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Final

from ..contract.model import VALIDATION_KINDS, ContractDefinition, TypeReference
from ..framework.target import TargetGeneratorBase
from ..framework.type_mapper import TypeMapperBase
from ..framework.types import (
    GeneratedFile,
    GeneratedUtility,
    TypeContext,
    TypeResult,
    UnsupportedValidation,
    create_support,
)
from ..shared.naming import to_pascal_case, ts_property_key
from .rendering import quote, get_generator_context

PRIMITIVE_TYPES: Final[dict[str, str]] = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
}

TS_SUPPORT = create_support(
    supported_validations=(),
    unsupported_validations=tuple(
        UnsupportedValidation(kind, "TypeScript types do not enforce runtime constraints")
        for kind in VALIDATION_KINDS
    ),
    notes=("Dates are typed as ISO-8601 strings.",),
)


def ts_type_name(name: str) -> str:
    return to_pascal_case(name) or "Unnamed"


def _group(type_expr: str) -> str:
    """Parenthesize a union before it is suffixed with ``[]``."""
    return f"({type_expr})" if " | " in type_expr else type_expr


class TsTypeMapper(TypeMapperBase[str]):
    """Maps TypeReferences to TypeScript type expressions."""

    def __init__(self) -> None:
        super().__init__()
        self.type_mapping = {
            "object": self.map_object,
            "array": self.map_array,
            "primitive": self.map_primitive,
            "optional": self.map_optional,
            "nullable": self.map_nullable,
            "union": self.map_union,
            "enum": self.map_enum,
            "literal": self.map_literal,
            "record": self.map_record,
            "tuple": self.map_tuple,
            "date": self.map_date,
        }

    def map_object(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        return TypeResult("Record<string, unknown>")

    def map_array(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        element = self.map_nested(ctx, ctx.type_ref.element_type)
        return TypeResult(f"{_group(element.type)}[]")

    def map_primitive(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        return TypeResult(PRIMITIVE_TYPES.get(str(ctx.type_ref.base_type), "unknown"))

    def map_optional(self, ctx: TypeContext) -> TypeResult[str]:
        inner = self.map_nested(ctx, ctx.type_ref.base_type, ctx.field_name)
        return TypeResult(f"{inner.type} | undefined")

    def map_nullable(self, ctx: TypeContext) -> TypeResult[str]:
        inner = self.map_nested(ctx, ctx.type_ref.base_type, ctx.field_name)
        return TypeResult(f"{inner.type} | null")

    def map_union(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        members = [self.map_nested(ctx, member).type for member in ctx.type_ref.union_types or ()]
        return TypeResult(" | ".join(members) or "never")

    def map_enum(self, ctx: TypeContext) -> TypeResult[str]:
        values = " | ".join(json.dumps(v) for v in ctx.type_ref.enum_values or ())
        if not ctx.name:
            return TypeResult(values or "never")
        name = ts_type_name(ctx.name)
        utility = GeneratedUtility(
            name=f"{name}_enum",
            code=f"export type {name} = {values};",
        )
        return TypeResult(name, utilities=(utility,))

    def map_literal(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        return TypeResult(json.dumps(ctx.type_ref.literal_value))

    def map_record(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        key = self.map_nested(ctx, ctx.type_ref.key_type)
        value = self.map_nested(ctx, ctx.type_ref.value_type)
        return TypeResult(f"Record<{key.type}, {value.type}>")

    def map_tuple(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        elements = [self.map_nested(ctx, e).type for e in ctx.type_ref.tuple_elements or ()]
        return TypeResult(f"[{', '.join(elements)}]")

    def map_date(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(ts_type_name(ctx.name))
        return TypeResult("string")


@dataclass(frozen=True, slots=True)
class TsField:
    key: str
    type: str
    optional: bool


@dataclass(frozen=True, slots=True)
class TsInterface:
    name: str
    fields: list[TsField]


@dataclass(frozen=True, slots=True)
class TsAlias:
    name: str
    type: str


@dataclass(frozen=True, slots=True)
class TsEndpoint:
    key: str
    type: str
    input: str
    output: str


class TypeScriptTypesTarget(TargetGeneratorBase):
    name = "ts-types"
    description = "TypeScript interfaces and an endpoint map"
    support = TS_SUPPORT

    def __init__(self) -> None:
        self.type_mapper = TsTypeMapper()
        super().__init__()

    def generate(self, contract: ContractDefinition) -> list[GeneratedFile]:
        interfaces: list[TsInterface] = []
        aliases: list[TsAlias] = []

        for type_def in contract.types:
            if type_def.kind == "object":
                interfaces.append(self._interface(type_def))
            elif type_def.kind == "enum":
                self.type_mapper.map(type_def)
            else:
                underlying = self.type_mapper.map(replace(type_def, name=None), depth=1)
                aliases.append(TsAlias(ts_type_name(type_def.name or ""), underlying.type))

        endpoints = [
            TsEndpoint(
                key=ts_property_key(endpoint.full_name),
                type=quote(endpoint.type),
                input=self.type_mapper.map(endpoint.input).type,
                output=self.type_mapper.map(endpoint.output).type,
            )
            for endpoint in contract.endpoints
        ]
        middleware = " | ".join(quote(m.name) for m in contract.middleware)

        source = get_generator_context().ts_types_template.render(
            aliases=aliases,
            interfaces=interfaces,
            endpoints=endpoints,
            middleware=middleware,
            utilities=self.type_mapper.utilities.generate_code("\n"),
        )
        return [GeneratedFile("types.ts", source)]

    def _interface(self, type_def: TypeReference) -> TsInterface:
        fields = []
        for prop in type_def.properties or ():
            # Absence is expressed by "?", not by "| undefined"
            field_type = prop.type.base_type if prop.type.kind == "optional" else prop.type
            mapped = self.type_mapper.map(
                field_type, depth=1, parent_name=type_def.name, field_name=prop.name
            )
            fields.append(TsField(ts_property_key(prop.name), mapped.type, not prop.required))
        return TsInterface(ts_type_name(type_def.name or ""), fields)
