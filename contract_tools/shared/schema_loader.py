"""Contract document loading utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Final

import yaml

from .errors import ContractError

YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yml", ".yaml"})


def load_document(path: Path) -> dict[str, Any]:
    """Load a contract document from a YAML or JSON file.

    Args:
        path: Path to the contract file.

    Returns:
        The parsed document.

    Raises:
        ContractError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ContractError(f"Failed to read contract file: {e}", str(path)) from e

    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ContractError(f"Invalid YAML: {e}", str(path)) from e
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ContractError(f"Invalid JSON: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise ContractError("Contract root must be a mapping", str(path))

    return data


def dump_document(data: Any, path: Path) -> None:
    """Write data as YAML or JSON depending on the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in YAML_SUFFIXES:
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
