"""
Go server target - structs for every named type plus validation functions.

Produces ``types.go`` (structs, aliases and enum constants), ``validation.go``
(one ``Validate<Type>`` function per struct, descending into named object
fields and array elements) and ``router.go`` (a ``Handler`` interface with one
method per endpoint and a ``Dispatch`` function keyed by the endpoint's full
name). Unions and tuples have no Go equivalent and degrade to ``interface{}``
and ``[]interface{}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import ClassVar, Final

from ..contract.model import ContractDefinition, Endpoint, Property, TypeReference
from ..framework.target import TargetGeneratorBase
from ..framework.type_mapper import TypeMapperBase, create_unsupported_type_handler
from ..framework.types import (
    GeneratedFile,
    GeneratedUtility,
    TypeContext,
    TypeResult,
    UnsupportedType,
    ValidationContext,
    ValidationResult,
    create_support,
)
from ..framework.validation_mapper import ValidationMapperBase
from ..shared.naming import go_identifier
from .rendering import quote, format_number, get_generator_context

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES: Final[dict[str, str]] = {
    "string": "string",
    "number": "float64",
    "integer": "int64",
    "boolean": "bool",
}

# Go types whose zero value is already nil
NILLABLE_PREFIXES: Final[tuple[str, ...]] = ("*", "[]", "map[", "interface{}")

UUID_PATTERN: Final[str] = (
    "^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

EMAIL_UTILITY = GeneratedUtility(
    name="isValidEmail",
    code=(
        "func isValidEmail(value string) bool {\n"
        "\t_, err := mail.ParseAddress(value)\n"
        "\treturn err == nil\n"
        "}"
    ),
    imports=("net/mail",),
)

URL_UTILITY = GeneratedUtility(
    name="isValidURL",
    code=(
        "func isValidURL(value string) bool {\n"
        "\tparsed, err := url.ParseRequestURI(value)\n"
        '\treturn err == nil && parsed.Scheme != "" && parsed.Host != ""\n'
        "}"
    ),
    imports=("net/url",),
)

UUID_UTILITY = GeneratedUtility(
    name="isValidUUID",
    code=(
        f"var uuidPattern = regexp.MustCompile(`{UUID_PATTERN}`)\n"
        "\n"
        "func isValidUUID(value string) bool {\n"
        "\treturn uuidPattern.MatchString(value)\n"
        "}"
    ),
    imports=("regexp",),
)

GO_SUPPORT = create_support(
    supported_types=(
        "object",
        "array",
        "primitive",
        "optional",
        "nullable",
        "enum",
        "literal",
        "record",
        "date",
    ),
    unsupported_types=(
        UnsupportedType("union", "Go has no sum types", "interface{}"),
        UnsupportedType("tuple", "Go has no tuple types", "[]interface{}"),
    ),
    notes=("Optional fields are tagged omitempty; nullable fields become pointers.",),
)


def _go_string(value: str) -> str:
    """Raw string literal when possible, interpreted literal otherwise."""
    if "`" in value:
        return quote(value)
    return f"`{value}`"


class GoTypeMapper(TypeMapperBase[str]):
    """Maps TypeReferences to Go type expressions."""

    def __init__(self) -> None:
        super().__init__()
        self.type_mapping = {
            "object": self.map_object,
            "array": self.map_array,
            "primitive": self.map_primitive,
            "optional": self.map_optional,
            "nullable": self.map_nullable,
            "union": create_unsupported_type_handler("union", "interface{}"),
            "enum": self.map_enum,
            "literal": self.map_literal,
            "record": self.map_record,
            "tuple": create_unsupported_type_handler("tuple", "[]interface{}"),
            "date": self.map_date,
        }

    def map_object(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        return TypeResult("map[string]interface{}")

    def map_array(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        element = self.map_nested(ctx, ctx.type_ref.element_type)
        return TypeResult(f"[]{element.type}")

    def map_primitive(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        return TypeResult(PRIMITIVE_TYPES.get(str(ctx.type_ref.base_type), "interface{}"))

    def map_optional(self, ctx: TypeContext) -> TypeResult[str]:
        return self.map_nested(ctx, ctx.type_ref.base_type, ctx.field_name)

    def map_nullable(self, ctx: TypeContext) -> TypeResult[str]:
        inner = self.map_nested(ctx, ctx.type_ref.base_type, ctx.field_name)
        if inner.type.startswith(NILLABLE_PREFIXES):
            return inner
        return TypeResult(f"*{inner.type}")

    def map_enum(self, ctx: TypeContext) -> TypeResult[str]:
        values = ctx.type_ref.enum_values or ()
        base = "string" if all(isinstance(v, str) for v in values) else "float64"
        if not ctx.name:
            return TypeResult(base)

        name = go_identifier(ctx.name)
        constants = "\n".join(
            f"\t{name}{go_identifier(str(value))} {name} = "
            f"{quote(value) if isinstance(value, str) else format_number(value)}"
            for value in values
        )
        utility = GeneratedUtility(
            name=f"{name}_enum",
            code=f"type {name} {base}\n\nconst (\n{constants}\n)",
        )
        return TypeResult(name, utilities=(utility,))

    def map_literal(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        value = ctx.type_ref.literal_value
        if isinstance(value, bool):
            return TypeResult("bool")
        if isinstance(value, str):
            return TypeResult("string")
        return TypeResult("float64")

    def map_record(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        key = self.map_nested(ctx, ctx.type_ref.key_type)
        value = self.map_nested(ctx, ctx.type_ref.value_type)
        return TypeResult(f"map[{key.type}]{value.type}")

    def map_date(self, ctx: TypeContext) -> TypeResult[str]:
        if ctx.name:
            return TypeResult(go_identifier(ctx.name))
        return TypeResult("time.Time", imports=("time",))


@dataclass(frozen=True, slots=True)
class GoValidationCode:
    """A Go boolean expression that is true when the check fails."""

    condition: str | None
    message: str


class GoValidationMapper(ValidationMapperBase[GoValidationCode]):
    """Maps validation rules to Go failure conditions on ``ctx.field_path``."""

    def __init__(self) -> None:
        super().__init__()
        self.validation_mapping = {
            "minLength": self.map_min_length,
            "maxLength": self.map_max_length,
            "email": self.map_email,
            "url": self.map_url,
            "uuid": self.map_uuid,
            "regex": self.map_regex,
            "min": self.map_min,
            "max": self.map_max,
            "int": self.map_int,
            "positive": self.map_positive,
            "negative": self.map_negative,
            "minItems": self.map_min_items,
            "maxItems": self.map_max_items,
        }

    @staticmethod
    def _check(
        condition: str | None,
        message: str,
        *utilities: GeneratedUtility,
        imports: tuple[str, ...] = (),
    ) -> ValidationResult[GoValidationCode]:
        return ValidationResult(
            GoValidationCode(condition, message),
            utilities=utilities,
            imports=imports,
        )

    def map_min_length(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"len({ctx.field_path}) < {ctx.value}",
            f"must be at least {ctx.value} characters",
        )

    def map_max_length(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"len({ctx.field_path}) > {ctx.value}",
            f"must be at most {ctx.value} characters",
        )

    def map_email(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"!isValidEmail(string({ctx.field_path}))",
            "must be a valid email address",
            EMAIL_UTILITY,
        )

    def map_url(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(f"!isValidURL(string({ctx.field_path}))", "must be a valid URL", URL_UTILITY)

    def map_uuid(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(f"!isValidUUID(string({ctx.field_path}))", "must be a valid UUID", UUID_UTILITY)

    def map_regex(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"!regexp.MustCompile({_go_string(ctx.value)}).MatchString(string({ctx.field_path}))",
            f"must match pattern {ctx.value}",
            imports=("regexp",),
        )

    def map_min(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        bound = format_number(ctx.value)
        return self._check(f"float64({ctx.field_path}) < {bound}", f"must be at least {bound}")

    def map_max(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        bound = format_number(ctx.value)
        return self._check(f"float64({ctx.field_path}) > {bound}", f"must be at most {bound}")

    def map_int(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        if ctx.base_type == "integer":
            # int64 already enforces it
            return self._check(None, "must be an integer")
        return self._check(
            f"{ctx.field_path} != math.Trunc({ctx.field_path})",
            "must be an integer",
            imports=("math",),
        )

    def map_positive(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(f"{ctx.field_path} <= 0", "must be positive")

    def map_negative(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(f"{ctx.field_path} >= 0", "must be negative")

    def map_min_items(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"len({ctx.field_path}) < {ctx.value}",
            f"must contain at least {ctx.value} items",
        )

    def map_max_items(self, ctx: ValidationContext) -> ValidationResult[GoValidationCode]:
        return self._check(
            f"len({ctx.field_path}) > {ctx.value}",
            f"must contain at most {ctx.value} items",
        )


@dataclass(frozen=True, slots=True)
class GoField:
    name: str
    type: str
    tag: str


@dataclass(frozen=True, slots=True)
class GoStruct:
    name: str
    fields: list[GoField]


@dataclass(frozen=True, slots=True)
class GoAlias:
    name: str
    type: str


@dataclass(frozen=True, slots=True)
class GoFieldChecks:
    """Checks for one struct field, guarded when the field may be absent."""

    kind: ClassVar[str] = "checks"

    label: str
    guard: str | None
    deref: str | None
    checks: list[GoValidationCode]


@dataclass(frozen=True, slots=True)
class GoNestedCheck:
    """A call into a named object's validator, or one per array element when ``loop`` is set."""

    kind: ClassVar[str] = "nested"

    label: str
    call: str
    guard: str | None = None
    loop: str | None = None


@dataclass(frozen=True, slots=True)
class GoValidator:
    name: str
    fields: list[GoFieldChecks | GoNestedCheck]


@dataclass(frozen=True, slots=True)
class GoRoute:
    full_name: str
    method: str
    type: str
    input: str
    output: str
    validator: str | None


def _zero_guard(access: str, go_type: str, base_type: str) -> str | None:
    if go_type.startswith(("[]", "map[")):
        return f"len({access}) > 0"
    if base_type == "string":
        return f'{access} != ""'
    if base_type in ("number", "integer"):
        return f"{access} != 0"
    return None


class GoServerTarget(TargetGeneratorBase):
    name = "go-server"
    description = "Go structs with Validate<Type> functions"
    support = GO_SUPPORT

    def __init__(self, package: str = "server") -> None:
        self.package = package
        self.type_mapper = GoTypeMapper()
        self.validation_mapper = GoValidationMapper()
        super().__init__()

    def generate(self, contract: ContractDefinition) -> list[GeneratedFile]:
        structs: list[GoStruct] = []
        aliases: list[GoAlias] = []
        validators: list[GoValidator] = []

        for type_def in contract.types:
            name = go_identifier(type_def.name or "Unnamed")
            if type_def.kind == "object":
                structs.append(self._struct(name, type_def))
                validators.append(self._validator(name, type_def))
            elif type_def.kind == "enum":
                # Declared by the enum's utility
                self.type_mapper.map(type_def)
            else:
                underlying = self.type_mapper.map(replace(type_def, name=None), depth=1)
                aliases.append(GoAlias(name, underlying.type))

        ctx = get_generator_context()
        types_source = ctx.go_types_template.render(
            package=self.package,
            imports=[quote(m) for m in sorted(self.type_mapper.get_collected_imports())],
            aliases=aliases,
            structs=structs,
            utilities=self.type_mapper.utilities.generate_code(),
        )

        validation_imports = {"strings", *self.validation_mapper.get_collected_imports()}
        if any(isinstance(f, GoNestedCheck) and f.loop for v in validators for f in v.fields):
            validation_imports.add("strconv")
        validation_source = ctx.go_validation_template.render(
            package=self.package,
            imports=[quote(m) for m in sorted(validation_imports)],
            validators=validators,
            utilities=self.validation_mapper.utilities.generate_code(),
        )

        # Separate mapper so router.go only imports what its signatures use
        route_mapper = GoTypeMapper()
        routes = [self._route(route_mapper, endpoint) for endpoint in contract.endpoints]
        router_imports = {"context", "encoding/json", "fmt", *route_mapper.get_collected_imports()}
        router_source = ctx.go_router_template.render(
            package=self.package,
            imports=[quote(m) for m in sorted(router_imports)],
            routes=routes,
        )
        logger.debug(
            "Rendered %d structs, %d aliases and %d routes",
            len(structs),
            len(aliases),
            len(routes),
        )

        return [
            GeneratedFile("types.go", types_source),
            GeneratedFile("validation.go", validation_source),
            GeneratedFile("router.go", router_source),
        ]

    @staticmethod
    def _route(mapper: GoTypeMapper, endpoint: Endpoint) -> GoRoute:
        validator = None
        if endpoint.input.kind == "object" and endpoint.input.name:
            validator = f"Validate{go_identifier(endpoint.input.name)}"
        return GoRoute(
            full_name=quote(endpoint.full_name),
            method=go_identifier(endpoint.full_name),
            type=quote(endpoint.type),
            input=mapper.map(endpoint.input, depth=1).type,
            output=mapper.map(endpoint.output, depth=1).type,
            validator=validator,
        )

    def _struct(self, name: str, type_def: TypeReference) -> GoStruct:
        fields = []
        for prop in type_def.properties or ():
            go_type = self.type_mapper.map(
                prop.type, depth=1, parent_name=type_def.name, field_name=prop.name
            ).type
            omit = "" if prop.required else ",omitempty"
            fields.append(GoField(
                name=go_identifier(prop.name),
                type=go_type,
                tag=f'`json:"{prop.name}{omit}"`',
            ))
        return GoStruct(name, fields)

    def _validator(self, name: str, type_def: TypeReference) -> GoValidator:
        fields: list[GoFieldChecks | GoNestedCheck] = []
        for prop in type_def.properties or ():
            field_checks = self._field_checks(type_def, prop)
            if field_checks is not None:
                fields.append(field_checks)
            nested = self._nested_check(type_def, prop)
            if nested is not None:
                fields.append(nested)
        return GoValidator(name, fields)

    def _nested_check(self, type_def: TypeReference, prop: Property) -> GoNestedCheck | None:
        """Validate a named object field, or each named object element of an array field.

        Optional object fields that are not pointers are skipped: their zero
        value can't be told apart from an absent field.
        """
        inner = prop.type.unwrap()
        access = f"in.{go_identifier(prop.name)}"
        label = quote(prop.name)

        if inner.kind == "object" and inner.name:
            call = f"Validate{go_identifier(inner.name)}"
            go_type = self.type_mapper.map(
                prop.type, depth=1, parent_name=type_def.name, field_name=prop.name
            ).type
            if go_type.startswith("*"):
                return GoNestedCheck(label, f"{call}({access})", guard=f"{access} != nil")
            if not prop.required:
                return None
            return GoNestedCheck(label, f"{call}(&{access})")

        if inner.kind != "array" or inner.element_type is None:
            return None
        element = inner.element_type.unwrap()
        if element.kind != "object" or not element.name:
            return None

        call = f"Validate{go_identifier(element.name)}"
        item = f"{access}[i]"
        label = f'{quote(prop.name + "[")} + strconv.Itoa(i) + "]"'
        if self.type_mapper.map(inner.element_type, depth=2).type.startswith("*"):
            return GoNestedCheck(label, f"{call}({item})", guard=f"{item} != nil", loop=access)
        return GoNestedCheck(label, f"{call}(&{item})", loop=access)

    def _field_checks(self, type_def: TypeReference, prop: Property) -> GoFieldChecks | None:
        inner = prop.type.unwrap()
        rules = prop.validation or inner.validation
        if not rules:
            return None

        go_type = self.type_mapper.map(
            prop.type, depth=1, parent_name=type_def.name, field_name=prop.name
        ).type
        base_type = self.type_mapper.base_type_of(prop.type)
        access = f"in.{go_identifier(prop.name)}"

        guard = deref = None
        if go_type.startswith("*"):
            guard = f"{access} != nil"
            deref = access
            access = "value"
        elif not prop.required:
            guard = _zero_guard(access, go_type, base_type)

        results = self.validation_mapper.map_all_validations(
            rules,
            field_name=prop.name,
            field_path=access,
            base_type=base_type,
            is_required=prop.required,
        )
        checks = [r.validation for r in results if r.validation.condition is not None]
        if not checks:
            return None
        return GoFieldChecks(label=quote(prop.name), guard=guard, deref=deref, checks=checks)
