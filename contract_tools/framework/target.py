"""Base class for code-generation targets."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ..contract.model import ContractDefinition
from .capabilities import validate_support
from .type_mapper import TypeMapperBase
from .types import Diagnostic, GeneratedFile, TargetOutput, TargetSupport
from .validation_mapper import ValidationMapperBase

logger = logging.getLogger(__name__)


class TargetGeneratorBase(ABC):
    """A code-generation backend driven by one ContractDefinition.

    Subclasses set ``name``, ``description`` and ``support``, build their
    mappers in ``__init__`` before calling ``super().__init__()``, and
    implement ``generate``.
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    support: ClassVar[TargetSupport]

    type_mapper: TypeMapperBase[Any]
    validation_mapper: ValidationMapperBase[Any] | None = None

    def __init__(self) -> None:
        self.verify_mappers()

    def verify_mappers(self) -> None:
        """Raise IncompleteMapperError if any mapper table has a gap."""
        self.type_mapper.verify_completeness()
        if self.validation_mapper is not None:
            self.validation_mapper.verify_completeness()

    def validate_contract(self, contract: ContractDefinition) -> list[Diagnostic]:
        return validate_support(contract, self.support, self.name)

    def reset_mappers(self) -> None:
        self.type_mapper.reset()
        if self.validation_mapper is not None:
            self.validation_mapper.reset()

    @abstractmethod
    def generate(self, contract: ContractDefinition) -> list[GeneratedFile]:
        """Render the contract into files."""

    def run(self, contract: ContractDefinition) -> TargetOutput:
        """Validate and generate in one pass on freshly reset mappers."""
        self.reset_mappers()
        diagnostics = self.validate_contract(contract)
        files = self.generate(contract)
        logger.info(
            "%s generated %d files with %d diagnostics",
            self.name,
            len(files),
            len(diagnostics),
        )
        return TargetOutput(files=files, diagnostics=diagnostics)
