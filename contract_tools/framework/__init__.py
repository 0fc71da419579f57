"""Target framework: mapping bases, utility collection and capability checks."""

from .types import (
    TypeContext,
    TypeResult,
    TypeHandler,
    ValidationContext,
    ValidationResult,
    ValidationHandler,
    GeneratedUtility,
    GeneratedFile,
    TargetOutput,
    TargetSupport,
    UnsupportedType,
    UnsupportedValidation,
    create_support,
    Diagnostic,
    has_errors,
)
from .utility_collector import UtilityCollector
from .type_mapper import TypeMapperBase, create_unsupported_type_handler
from .validation_mapper import (
    ValidationMapperBase,
    create_noop_validation_handler,
    create_unsupported_validation_handler,
)
from .capabilities import (
    ContractUsage,
    MAX_USAGE_PATHS,
    collect_contract_usage,
    validate_support,
)
from .target import TargetGeneratorBase

__all__ = [
    # Types
    "TypeContext",
    "TypeResult",
    "TypeHandler",
    "ValidationContext",
    "ValidationResult",
    "ValidationHandler",
    "GeneratedUtility",
    "GeneratedFile",
    "TargetOutput",
    "TargetSupport",
    "UnsupportedType",
    "UnsupportedValidation",
    "create_support",
    "Diagnostic",
    "has_errors",
    # Utilities
    "UtilityCollector",
    # Mappers
    "TypeMapperBase",
    "create_unsupported_type_handler",
    "ValidationMapperBase",
    "create_noop_validation_handler",
    "create_unsupported_validation_handler",
    # Capabilities
    "ContractUsage",
    "MAX_USAGE_PATHS",
    "collect_contract_usage",
    "validate_support",
    # Targets
    "TargetGeneratorBase",
]
