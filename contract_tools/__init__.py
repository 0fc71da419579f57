"""
Contract tools - schema-first API contracts to a typed IR and generated code.

The public surface: ``extract`` builds a ContractDefinition from a router,
``TypeMapperBase`` and ``UtilityCollector`` are the building blocks for
targets, and ``validate_support`` reports what a target cannot express.
"""

from .contract import (
    ContractDefinition,
    Endpoint,
    Property,
    TypeReference,
    ValidationRules,
    create_router,
    extract,
    mutation,
    query,
    router_from_document,
)
from .framework import (
    Diagnostic,
    GeneratedUtility,
    TargetGeneratorBase,
    TargetSupport,
    TypeMapperBase,
    UtilityCollector,
    ValidationMapperBase,
    create_support,
    validate_support,
)
from .shared import ContractError

__version__ = "0.1.0"

__all__ = [
    "ContractDefinition",
    "Endpoint",
    "Property",
    "TypeReference",
    "ValidationRules",
    "create_router",
    "extract",
    "mutation",
    "query",
    "router_from_document",
    "Diagnostic",
    "GeneratedUtility",
    "TargetGeneratorBase",
    "TargetSupport",
    "TypeMapperBase",
    "UtilityCollector",
    "ValidationMapperBase",
    "create_support",
    "validate_support",
    "ContractError",
]
