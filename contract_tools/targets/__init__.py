"""Bundled code-generation targets and their registry."""

from __future__ import annotations

from typing import Final

from ..framework.target import TargetGeneratorBase
from ..shared.errors import ContractError
from .go_server import GoServerTarget, GoTypeMapper, GoValidationMapper
from .typescript import TsTypeMapper, TypeScriptTypesTarget

TARGETS: Final[dict[str, type[TargetGeneratorBase]]] = {
    GoServerTarget.name: GoServerTarget,
    TypeScriptTypesTarget.name: TypeScriptTypesTarget,
}


def get_target(name: str) -> TargetGeneratorBase:
    """Instantiate a registered target by name.

    Raises:
        ContractError: If no target is registered under ``name``.
    """
    target_cls = TARGETS.get(name)
    if target_cls is None:
        raise ContractError(
            f"Unknown target '{name}'. Available targets: {', '.join(TARGETS)}"
        )
    return target_cls()


__all__ = [
    "TARGETS",
    "get_target",
    "GoServerTarget",
    "GoTypeMapper",
    "GoValidationMapper",
    "TypeScriptTypesTarget",
    "TsTypeMapper",
]
