"""
Type mapper base - exhaustive dispatch from TypeKind to target handlers.

A target subclasses ``TypeMapperBase`` and fills ``type_mapping`` with one
handler per kind in ``TYPE_KINDS``. ``verify_completeness`` checks the table
up front, so a missing handler is found when the target is built instead of
halfway through a generation run.

Example:
    class GoTypeMapper(TypeMapperBase[str]):
        def __init__(self) -> None:
            super().__init__()
            self.type_mapping = {
                "primitive": self.map_primitive,
                "array": self.map_array,
                # ... one entry per type kind
            }
"""

from __future__ import annotations

import logging
from typing import Callable, Generic

from ..contract.model import TYPE_KINDS, TypeKind, TypeReference, is_type_kind
from ..shared.errors import IncompleteMapperError, MissingHandlerError, UnknownTypeKindError
from .types import GeneratedUtility, T, TypeContext, TypeHandler, TypeResult
from .utility_collector import UtilityCollector

logger = logging.getLogger(__name__)


class TypeMapperBase(Generic[T]):
    """Maps TypeReferences to a target's type representation ``T``."""

    type_mapping: dict[str, TypeHandler[T]]

    def __init__(self) -> None:
        self.type_mapping = {}
        self.utilities = UtilityCollector()
        self._imports: dict[str, None] = {}

    def map(
        self,
        type_ref: TypeReference,
        *,
        name: str | None = None,
        depth: int = 0,
        parent_name: str | None = None,
        field_name: str | None = None,
    ) -> TypeResult[T]:
        """Dispatch ``type_ref`` to the handler for its kind.

        Raises:
            UnknownTypeKindError: If the kind is not one of TYPE_KINDS.
            MissingHandlerError: If the table has no handler for the kind.
        """
        kind = type_ref.kind
        if not is_type_kind(kind):
            raise UnknownTypeKindError(str(kind), TYPE_KINDS)

        handler = self.type_mapping.get(kind)
        if handler is None:
            raise MissingHandlerError(kind, type(self).__name__)

        ctx = TypeContext(
            type_ref=type_ref,
            name=name if name is not None else type_ref.name,
            depth=depth,
            parent_name=parent_name,
            field_name=field_name,
        )
        result = handler(ctx)

        self.utilities.add_all(result.utilities)
        for module in result.imports:
            self._imports.setdefault(module, None)
        return result

    def map_nested(
        self,
        ctx: TypeContext,
        type_ref: TypeReference,
        field_name: str | None = None,
    ) -> TypeResult[T]:
        """Map a child of ``ctx.type_ref`` one level deeper."""
        return self.map(
            type_ref,
            depth=ctx.depth + 1,
            parent_name=ctx.name or ctx.parent_name,
            field_name=field_name,
        )

    @staticmethod
    def base_type_of(type_ref: TypeReference) -> str:
        """Primitive tag under any wrappers, or the kind for non-primitives."""
        current = type_ref.unwrap()
        if isinstance(current.base_type, str):
            return current.base_type
        return current.kind

    def verify_completeness(self) -> None:
        """Raise IncompleteMapperError naming every kind without a handler."""
        missing = [kind for kind in TYPE_KINDS if not self.type_mapping.get(kind)]
        if missing:
            raise IncompleteMapperError(type(self).__name__, missing)

    def get_collected_utilities(self) -> list[GeneratedUtility]:
        return self.utilities.get_all()

    def get_collected_imports(self) -> list[str]:
        """Imports of collected utilities, then those declared by results."""
        imports = dict.fromkeys(self.utilities.get_imports())
        imports.update(self._imports)
        return list(imports)

    def reset(self) -> None:
        self.utilities.reset()
        self._imports.clear()


def create_unsupported_type_handler(
    kind: TypeKind,
    fallback: T,
    warn: Callable[[str], None] | None = None,
) -> TypeHandler[T]:
    """Build a handler that reports ``kind`` as degraded and returns ``fallback``."""

    def handler(ctx: TypeContext) -> TypeResult[T]:
        message = f'Type kind "{kind}" is not fully supported. Using fallback type.'
        if warn is not None:
            warn(message)
        else:
            logger.warning("%s (at %s)", message, ctx.name or ctx.field_name or "<anonymous>")
        return TypeResult(type=fallback)

    return handler
