"""Validation mapper base - exhaustive dispatch from ValidationKind to handlers."""

from __future__ import annotations

import logging
from typing import Callable, Generic

from ..contract.model import (
    VALIDATION_KINDS,
    ValidationKind,
    ValidationRules,
    get_validations_for_type,
    is_validation_kind,
)
from ..shared.errors import IncompleteMapperError, ValidationMappingError
from .types import GeneratedUtility, V, ValidationContext, ValidationHandler, ValidationResult
from .utility_collector import UtilityCollector

logger = logging.getLogger(__name__)


class ValidationMapperBase(Generic[V]):
    """Maps validation rules to a target's check representation ``V``.

    Subclasses fill ``validation_mapping`` with one handler per kind in
    ``VALIDATION_KINDS``; targets that validate elsewhere can use
    ``create_noop_validation_handler`` for every entry.
    """

    validation_mapping: dict[str, ValidationHandler[V]]

    def __init__(self) -> None:
        self.validation_mapping = {}
        self.utilities = UtilityCollector()
        self._imports: dict[str, None] = {}

    def map_validation(self, rule: ValidationKind, ctx: ValidationContext) -> ValidationResult[V]:
        if not is_validation_kind(rule):
            raise ValidationMappingError(
                str(rule),
                f"unknown validation kind; valid kinds are: {', '.join(VALIDATION_KINDS)}",
            )

        handler = self.validation_mapping.get(rule)
        if handler is None:
            raise ValidationMappingError(rule, f"missing handler in {type(self).__name__}")

        result = handler(ctx)
        self.utilities.add_all(result.utilities)
        for module in result.imports:
            self._imports.setdefault(module, None)
        return result

    def map_all_validations(
        self,
        rules: ValidationRules,
        field_name: str,
        field_path: str,
        base_type: str,
        is_required: bool,
    ) -> list[ValidationResult[V]]:
        """Map every set rule that applies to ``base_type``, in VALIDATION_KINDS order."""
        results: list[ValidationResult[V]] = []
        for rule in self.get_applicable_rules(base_type):
            value = rules.get(rule)
            if value is None:
                continue
            ctx = ValidationContext(
                rule=rule,
                value=value,
                field_name=field_name,
                field_path=field_path,
                base_type=base_type,
                is_required=is_required,
                all_rules=rules,
            )
            results.append(self.map_validation(rule, ctx))
        return results

    def get_applicable_rules(self, base_type: str) -> tuple[ValidationKind, ...]:
        return get_validations_for_type(base_type)

    def is_rule_applicable(self, rule: ValidationKind, base_type: str) -> bool:
        return rule in self.get_applicable_rules(base_type)

    def verify_completeness(self) -> None:
        missing = [kind for kind in VALIDATION_KINDS if not self.validation_mapping.get(kind)]
        if missing:
            raise IncompleteMapperError(type(self).__name__, missing)

    def get_collected_utilities(self) -> list[GeneratedUtility]:
        return self.utilities.get_all()

    def get_collected_imports(self) -> list[str]:
        imports = dict.fromkeys(self.utilities.get_imports())
        imports.update(self._imports)
        return list(imports)

    def reset(self) -> None:
        self.utilities.reset()
        self._imports.clear()


def create_noop_validation_handler() -> ValidationHandler[None]:
    """Handler for targets that leave a rule to some other layer."""

    def handler(ctx: ValidationContext) -> ValidationResult[None]:
        return ValidationResult(validation=None)

    return handler


def create_unsupported_validation_handler(
    kind: ValidationKind,
    default: V,
    warn: Callable[[str], None] | None = None,
) -> ValidationHandler[V]:
    def handler(ctx: ValidationContext) -> ValidationResult[V]:
        message = f'Validation "{kind}" is not supported for this target.'
        if warn is not None:
            warn(message)
        else:
            logger.warning("%s (at %s)", message, ctx.field_path)
        return ValidationResult(validation=default)

    return handler
