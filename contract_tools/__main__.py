#!/usr/bin/env python3
"""
Contract tools CLI.

Usage:
    python -m contract_tools [--verbose] <command> [options]

Commands:
    extract     Print the extracted contract IR as JSON
    validate    Check a contract against a target's capabilities
    generate    Generate code for a target
    targets     List available targets

Examples:
    python -m contract_tools extract api.yaml --output contract.json
    python -m contract_tools validate api.yaml --target go-server
    python -m contract_tools generate api.yaml --target ts-types --output-dir web/src/api
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from contract_tools.contract import ContractDefinition, extract, router_from_document
from contract_tools.framework import Diagnostic, has_errors
from contract_tools.shared import ContractError, dump_document, load_document
from contract_tools.targets import TARGETS, get_target

VERBOSE_FLAGS = ("-v", "--verbose")


def _load_contract(path: str) -> ContractDefinition:
    source = Path(path)
    document = load_document(source)
    return extract(router_from_document(document, str(source)))


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        print(diagnostic)


def cmd_extract(args: list[str]) -> int:
    """Extract the contract IR."""
    parser = argparse.ArgumentParser(prog="contract_tools extract", description="Extract the contract IR")
    parser.add_argument("contract", help="Contract document (YAML or JSON)")
    parser.add_argument("--output", "-o", help="Write the IR here instead of stdout")
    parsed = parser.parse_args(args)

    try:
        contract = _load_contract(parsed.contract)
    except ContractError as e:
        print(f"Error: {e}")
        return 1

    data = contract.to_dict()
    if parsed.output:
        dump_document(data, Path(parsed.output))
        print(
            f"Wrote {len(contract.endpoints)} endpoints and "
            f"{len(contract.types)} types to {parsed.output}"
        )
    else:
        print(json.dumps(data, indent=2))
    return 0


def cmd_validate(args: list[str]) -> int:
    """Validate a contract against a target."""
    parser = argparse.ArgumentParser(
        prog="contract_tools validate",
        description="Check a contract against a target's capabilities",
    )
    parser.add_argument("contract", help="Contract document (YAML or JSON)")
    parser.add_argument("--target", "-t", required=True, choices=list(TARGETS), help="Target name")
    parser.add_argument("--json", action="store_true", help="Print diagnostics as JSON")
    parsed = parser.parse_args(args)

    try:
        contract = _load_contract(parsed.contract)
        target = get_target(parsed.target)
    except ContractError as e:
        print(f"Error: {e}")
        return 1

    diagnostics = target.validate_contract(contract)
    if parsed.json:
        print(json.dumps([d.to_dict() for d in diagnostics], indent=2))
    elif diagnostics:
        _print_diagnostics(diagnostics)
    else:
        print(f"Contract is fully supported by {target.name}")
    return 1 if has_errors(diagnostics) else 0


def cmd_generate(args: list[str]) -> int:
    """Generate code for a target."""
    parser = argparse.ArgumentParser(prog="contract_tools generate", description="Generate code for a target")
    parser.add_argument("contract", help="Contract document (YAML or JSON)")
    parser.add_argument("--target", "-t", required=True, choices=list(TARGETS), help="Target name")
    parser.add_argument("--output-dir", "-o", default="generated", help="Output directory")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Write files even when the contract has unsupported features",
    )
    parsed = parser.parse_args(args)

    try:
        contract = _load_contract(parsed.contract)
        target = get_target(parsed.target)
    except ContractError as e:
        print(f"Error: {e}")
        return 1

    output = target.run(contract)
    _print_diagnostics(output.diagnostics)
    if not output.ok and not parsed.force:
        print(f"Refusing to write {target.name} output; rerun with --force to override")
        return 1

    output_dir = Path(parsed.output_dir)
    for generated in output.files:
        path = output_dir / generated.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generated.content, encoding="utf-8")
        print(f"  wrote {path}")
    print(f"Generated {len(output.files)} {target.name} files in {output_dir}")
    return 0


def cmd_targets(args: list[str]) -> int:
    """List available targets."""
    for name, target_cls in TARGETS.items():
        print(f"  {name:12} {target_cls.description}")
        for note in target_cls.support.notes:
            print(f"  {'':12} note: {note}")
    return 0


COMMANDS = {
    "extract": (cmd_extract, "Print the extracted contract IR as JSON"),
    "validate": (cmd_validate, "Check a contract against a target's capabilities"),
    "generate": (cmd_generate, "Generate code for a target"),
    "targets": (cmd_targets, "List available targets"),
}


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    verbose = any(flag in argv for flag in VERBOSE_FLAGS)
    argv = [arg for arg in argv if arg not in VERBOSE_FLAGS]
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not argv or argv[0] in ("-h", "--help"):
        print(__doc__)
        print("Available commands:")
        for name, (_, desc) in COMMANDS.items():
            print(f"  {name:12} {desc}")
        print("\nUse '<command> --help' for command-specific options.")
        return 0

    command = argv[0]
    args = argv[1:]

    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        print(f"Available commands: {', '.join(COMMANDS.keys())}")
        return 1

    handler, _ = COMMANDS[command]
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
