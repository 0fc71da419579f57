"""
Framework data types shared by type mappers, validation mappers and targets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Literal, TypeVar

from ..contract.model import (
    TYPE_KINDS,
    VALIDATION_KINDS,
    TypeKind,
    TypeReference,
    ValidationKind,
    ValidationRules,
)

T = TypeVar("T")
V = TypeVar("V")

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class TypeContext:
    """What a type handler is given: the reference plus naming hints."""

    type_ref: TypeReference
    name: str | None = None
    depth: int = 0
    parent_name: str | None = None
    field_name: str | None = None


@dataclass(frozen=True, slots=True)
class GeneratedUtility:
    """A helper emitted alongside generated code, deduplicated by ``name``."""

    name: str
    code: str
    imports: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeResult(Generic[T]):
    type: T
    utilities: tuple[GeneratedUtility, ...] = ()
    imports: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """What a validation handler is given for one rule on one field."""

    rule: ValidationKind
    value: Any
    field_name: str
    field_path: str
    base_type: str
    is_required: bool
    all_rules: ValidationRules


@dataclass(frozen=True, slots=True)
class ValidationResult(Generic[V]):
    validation: V
    utilities: tuple[GeneratedUtility, ...] = ()
    imports: tuple[str, ...] = ()


TypeHandler = Callable[[TypeContext], TypeResult[T]]
ValidationHandler = Callable[[ValidationContext], ValidationResult[V]]


@dataclass(frozen=True, slots=True)
class UnsupportedType:
    """A type kind a target renders only partially, or not at all."""

    kind: TypeKind
    reason: str
    fallback: str | None = None


@dataclass(frozen=True, slots=True)
class UnsupportedValidation:
    kind: ValidationKind
    reason: str


@dataclass(frozen=True, slots=True)
class TargetSupport:
    """A target's declaration of what it can render.

    Kinds listed in ``supported_*`` need no diagnostics. Kinds listed in
    ``unsupported_*`` are partially supported and produce warnings. Kinds in
    neither list produce errors.
    """

    supported_types: tuple[TypeKind, ...]
    supported_validations: tuple[ValidationKind, ...]
    unsupported_types: tuple[UnsupportedType, ...] = ()
    unsupported_validations: tuple[UnsupportedValidation, ...] = ()
    notes: tuple[str, ...] = ()

    def find_unsupported_type(self, kind: str) -> UnsupportedType | None:
        return next((u for u in self.unsupported_types if u.kind == kind), None)

    def find_unsupported_validation(self, kind: str) -> UnsupportedValidation | None:
        return next((u for u in self.unsupported_validations if u.kind == kind), None)


def create_support(
    *,
    supported_types: Iterable[TypeKind] | None = None,
    supported_validations: Iterable[ValidationKind] | None = None,
    unsupported_types: Iterable[UnsupportedType] = (),
    unsupported_validations: Iterable[UnsupportedValidation] = (),
    notes: Iterable[str] = (),
) -> TargetSupport:
    """Build a TargetSupport; omitted ``supported_*`` lists default to everything."""
    return TargetSupport(
        supported_types=tuple(TYPE_KINDS if supported_types is None else supported_types),
        supported_validations=tuple(
            VALIDATION_KINDS if supported_validations is None else supported_validations
        ),
        unsupported_types=tuple(unsupported_types),
        unsupported_validations=tuple(unsupported_validations),
        notes=tuple(notes),
    )


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A located, severity-tagged capability mismatch."""

    severity: Severity
    message: str
    path: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        text = f"{self.severity}: {self.message}"
        if self.path:
            text += f" (at {self.path})"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"severity": self.severity, "message": self.message}
        if self.path is not None:
            data["path"] = self.path
        if self.hint is not None:
            data["hint"] = self.hint
        return data


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == "error" for d in diagnostics)


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """A file produced by a target, relative to the output directory."""

    path: str
    content: str


@dataclass(frozen=True, slots=True)
class TargetOutput:
    files: list[GeneratedFile] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not has_errors(self.diagnostics)
