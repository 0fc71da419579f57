"""Contract IR: model, router authoring API, schema introspection and extraction."""

from .model import (
    TypeKind,
    ValidationKind,
    OperationType,
    TYPE_KINDS,
    VALIDATION_KINDS,
    STRING_VALIDATIONS,
    NUMBER_VALIDATIONS,
    ARRAY_VALIDATIONS,
    WRAPPER_KINDS,
    is_type_kind,
    is_validation_kind,
    get_validations_for_type,
    ValidationRules,
    Property,
    TypeReference,
    TypeDefinition,
    Endpoint,
    EndpointGroup,
    MiddlewareDefinition,
    Router,
    ContractDefinition,
)
from .router import (
    OperationDefinition,
    RouterDefinition,
    query,
    mutation,
    create_router,
    router_from_document,
)
from .schema import SchemaNode, JsonSchemaNode
from .traversal import (
    Visit,
    walk,
    property_path,
    element_path,
    member_path,
    key_path,
    value_path,
)
from .extractor import ContractExtractor, extract

__all__ = [
    # Model
    "TypeKind",
    "ValidationKind",
    "OperationType",
    "TYPE_KINDS",
    "VALIDATION_KINDS",
    "STRING_VALIDATIONS",
    "NUMBER_VALIDATIONS",
    "ARRAY_VALIDATIONS",
    "WRAPPER_KINDS",
    "is_type_kind",
    "is_validation_kind",
    "get_validations_for_type",
    "ValidationRules",
    "Property",
    "TypeReference",
    "TypeDefinition",
    "Endpoint",
    "EndpointGroup",
    "MiddlewareDefinition",
    "Router",
    "ContractDefinition",
    # Router authoring
    "OperationDefinition",
    "RouterDefinition",
    "query",
    "mutation",
    "create_router",
    "router_from_document",
    # Schema introspection
    "SchemaNode",
    "JsonSchemaNode",
    # Traversal
    "Visit",
    "walk",
    "property_path",
    "element_path",
    "member_path",
    "key_path",
    "value_path",
    # Extraction
    "ContractExtractor",
    "extract",
]
