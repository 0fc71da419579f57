"""Shared utilities for contract tools."""

from .schema_loader import (
    load_document,
    dump_document,
)
from .naming import (
    to_pascal_case,
    go_identifier,
    ts_property_key,
)
from .errors import (
    ContractError,
    ExtractionError,
    RouterNotFoundError,
    InvalidOperationError,
    UnclassifiableSchemaError,
    TypeMappingError,
    UnknownTypeKindError,
    MissingHandlerError,
    IncompleteMapperError,
    ValidationMappingError,
)

__all__ = [
    # Document loading
    "load_document",
    "dump_document",
    # Naming utilities
    "to_pascal_case",
    "go_identifier",
    "ts_property_key",
    # Errors
    "ContractError",
    "ExtractionError",
    "RouterNotFoundError",
    "InvalidOperationError",
    "UnclassifiableSchemaError",
    "TypeMappingError",
    "UnknownTypeKindError",
    "MissingHandlerError",
    "IncompleteMapperError",
    "ValidationMappingError",
]
