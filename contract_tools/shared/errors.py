"""Custom exceptions for contract tools."""

from __future__ import annotations

from typing import Iterable


class ContractError(Exception):
    """Base exception for contract-related errors."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        full_message = f"{message}" if not path else f"[{path}] {message}"
        super().__init__(full_message)


class ExtractionError(ContractError):
    """Raised when a router cannot be turned into a contract definition."""


class RouterNotFoundError(ExtractionError):
    """Raised when no router or endpoint groups can be found."""


class InvalidOperationError(ExtractionError):
    """Raised when an operation definition is malformed."""

    def __init__(
        self,
        message: str,
        operation: str,
        field: str | None = None,
    ) -> None:
        self.operation = operation
        self.field = field
        if field:
            message = f"Field '{field}': {message}"
        super().__init__(message, operation)


class UnclassifiableSchemaError(ExtractionError):
    """Raised when a schema node matches none of the supported type kinds."""

    def __init__(self, detail: str, path: str | None = None) -> None:
        self.detail = detail
        super().__init__(f"Cannot classify schema: {detail}", path)


class TypeMappingError(ContractError):
    """Raised when a type mapping is missing or invalid."""

    def __init__(
        self,
        type_name: str,
        context: str,
        path: str | None = None,
    ) -> None:
        self.type_name = type_name
        super().__init__(f"No type mapping for '{type_name}' ({context})", path)


class UnknownTypeKindError(TypeMappingError):
    """Raised when a type reference carries a kind outside the known set."""

    def __init__(self, kind: str, known: Iterable[str]) -> None:
        self.known = tuple(known)
        super().__init__(kind, f"unknown kind; valid kinds are: {', '.join(self.known)}")


class MissingHandlerError(TypeMappingError):
    """Raised when a known kind has no handler in a mapper's table."""

    def __init__(self, kind: str, mapper: str) -> None:
        self.mapper = mapper
        super().__init__(kind, f"missing handler in {mapper}")


class IncompleteMapperError(ContractError):
    """Raised by completeness checks that find unhandled kinds."""

    def __init__(self, mapper: str, missing: Iterable[str]) -> None:
        self.mapper = mapper
        self.missing = tuple(missing)
        super().__init__(
            f"{mapper} is incomplete. Missing handlers for: {', '.join(self.missing)}"
        )


class ValidationMappingError(ContractError):
    """Raised when a validation rule cannot be dispatched to a handler."""

    def __init__(
        self,
        rule: str,
        context: str,
        path: str | None = None,
    ) -> None:
        self.rule = rule
        super().__init__(f"No validation mapping for '{rule}' ({context})", path)
