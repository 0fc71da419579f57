"""
Capability validation - contract usage versus what a target says it supports.

Usage collection walks every named type and every endpoint payload and
records, per type kind and validation kind, the first few distinct paths where
it occurs. ``validate_support`` then turns each used-but-unsupported kind into
one Diagnostic. Mismatches are reported, never raised, so a single pass shows
everything a target cannot express.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final

from ..contract.model import ContractDefinition, TypeReference, ValidationRules
from ..contract.traversal import walk
from .types import Diagnostic, TargetSupport

logger = logging.getLogger(__name__)

# Example paths kept per kind
MAX_USAGE_PATHS: Final[int] = 3


@dataclass(slots=True)
class ContractUsage:
    """Kinds in use, each mapped to up to MAX_USAGE_PATHS paths, in first-seen order."""

    types: dict[str, list[str]] = field(default_factory=dict)
    validations: dict[str, list[str]] = field(default_factory=dict)


def _add_usage(usage: dict[str, list[str]], kind: str, path: str) -> None:
    paths = usage.setdefault(kind, [])
    if len(paths) < MAX_USAGE_PATHS and path not in paths:
        paths.append(path)


def _add_validations(
    usage: dict[str, list[str]],
    rules: ValidationRules | None,
    path: str,
) -> None:
    if not rules:
        return
    for kind, _ in rules.items():
        _add_usage(usage, kind, path)


def _collect(usage: ContractUsage, root: TypeReference, root_path: str) -> None:
    for visit in walk(root, root_path):
        _add_usage(usage.types, visit.type_ref.kind, visit.path)
        _add_validations(usage.validations, visit.type_ref.validation, visit.path)
        if visit.property is not None:
            _add_validations(usage.validations, visit.property.validation, visit.path)


def collect_contract_usage(contract: ContractDefinition) -> ContractUsage:
    """Record where each type kind and validation kind is used.

    Named types are rooted at ``types.<Name>``; endpoint payloads at
    ``<group>.<operation>.input`` and ``.output``.
    """
    usage = ContractUsage()
    for type_def in contract.types:
        _collect(usage, type_def, f"types.{type_def.name or 'unknown'}")
    for endpoint in contract.endpoints:
        _collect(usage, endpoint.input, f"{endpoint.full_name}.input")
        _collect(usage, endpoint.output, f"{endpoint.full_name}.output")
    return usage


def validate_support(
    contract: ContractDefinition,
    support: TargetSupport,
    target_name: str | None = None,
) -> list[Diagnostic]:
    """Diagnose contract features ``support`` does not fully cover.

    A kind declared in ``unsupported_*`` yields a warning, any other kind
    outside ``supported_*`` yields an error. Type diagnostics come before
    validation diagnostics, each in first-seen order.
    """
    usage = collect_contract_usage(contract)
    limited_in = f" in {target_name}" if target_name else ""
    unsupported_by = f" by {target_name}" if target_name else ""
    diagnostics: list[Diagnostic] = []

    for kind, paths in usage.types.items():
        if kind in support.supported_types:
            continue
        partial = support.find_unsupported_type(kind)
        if partial is not None:
            diagnostics.append(Diagnostic(
                severity="warning",
                message=f'Type "{kind}" has limited support{limited_in}: {partial.reason}',
                path=paths[0],
                hint=f"Will fall back to: {partial.fallback}" if partial.fallback else None,
            ))
        else:
            diagnostics.append(Diagnostic(
                severity="error",
                message=f'Type "{kind}" is not supported{unsupported_by}',
                path=paths[0],
            ))

    for kind, paths in usage.validations.items():
        if kind in support.supported_validations:
            continue
        partial_validation = support.find_unsupported_validation(kind)
        if partial_validation is not None:
            diagnostics.append(Diagnostic(
                severity="warning",
                message=f'Validation "{kind}" has limited support{limited_in}: {partial_validation.reason}',
                path=paths[0],
            ))
        else:
            diagnostics.append(Diagnostic(
                severity="error",
                message=f'Validation "{kind}" is not supported{unsupported_by}',
                path=paths[0],
            ))

    logger.debug(
        "Validated contract against %s: %d diagnostics",
        target_name or "target",
        len(diagnostics),
    )
    return diagnostics
