"""Shared Jinja2 rendering context for the bundled targets."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Final

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

GENERATED_HEADER: Final[str] = "Code generated by contract-tools. DO NOT EDIT."


@lru_cache(maxsize=256)
def quote(value: str) -> str:
    """Quote a string as a Go or TypeScript literal."""
    return json.dumps(value)


def format_number(value: float) -> str:
    """Render a number literal without a trailing ``.0`` for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class GeneratorContext:
    """Context for code generation with pre-compiled templates."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,  # Templates ship with the package
        )
        self.template_env.filters["quote"] = quote
        self.template_env.globals["header"] = GENERATED_HEADER
        # Pre-compile templates
        self._go_types_template = self.template_env.get_template("types.go.j2")
        self._go_validation_template = self.template_env.get_template("validation.go.j2")
        self._go_router_template = self.template_env.get_template("router.go.j2")
        self._ts_types_template = self.template_env.get_template("types.ts.j2")

    @property
    def go_types_template(self) -> Template:
        return self._go_types_template

    @property
    def go_validation_template(self) -> Template:
        return self._go_validation_template

    @property
    def go_router_template(self) -> Template:
        return self._go_router_template

    @property
    def ts_types_template(self) -> Template:
        return self._ts_types_template


@lru_cache(maxsize=1)
def get_generator_context() -> GeneratorContext:
    return GeneratorContext()
