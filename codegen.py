#!/usr/bin/env python3
"""
Code generation wrapper for contract tools.

This is a convenience wrapper that forwards to the contract_tools module.
Run with --help to see available commands.

Usage:
    python codegen.py <command> [options]
    ./codegen.py <command> [options]  (on Unix with execute permission)

Commands:
    extract     Print the extracted contract IR as JSON
    validate    Check a contract against a target's capabilities
    generate    Generate code for a target
    targets     List available targets

Examples:
    python codegen.py extract api.yaml
    python codegen.py validate api.yaml --target go-server
    python codegen.py generate api.yaml --target go-server --output-dir server/
"""

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def main() -> int:
    """Forward all arguments to the contract_tools module."""
    return subprocess.call(
        [sys.executable, "-m", "contract_tools"] + sys.argv[1:],
        cwd=ROOT,
    )


if __name__ == "__main__":
    sys.exit(main())
