#!/usr/bin/env python3
"""
TS Refactor - Configuration

Module-level settings, each overridable from the environment.
"""

import os
import sys
from pathlib import Path


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        print(f"Warning: ignoring invalid {name}={value!r}", file=sys.stderr)
        return default


# Configuration
WORKSPACE = os.environ.get("TSREFACTOR_WORKSPACE", os.getcwd())
NODE_BINARY = os.environ.get("TSREFACTOR_NODE", "node")
TSSERVER_PATH = os.environ.get("TSREFACTOR_TSSERVER")  # None = <workspace>/node_modules/...
REQUEST_TIMEOUT = _env_float("TSREFACTOR_REQUEST_TIMEOUT", 30.0)  # seconds
READY_TIMEOUT = _env_float("TSREFACTOR_READY_TIMEOUT", 5.0)
SCAN_TIMEOUT = _env_float("TSREFACTOR_SCAN_TIMEOUT", 5.0)
POLL_INTERVAL = 0.1
INDEX_ATTEMPTS = 30
DEBUG = os.environ.get("TSREFACTOR_DEBUG", "").lower() in ("1", "true", "yes")


def tsserver_command(workspace: str) -> list[str]:
    """Build the argv that launches tsserver for a workspace."""
    tsserver = TSSERVER_PATH or str(Path(workspace) / "node_modules" / "typescript" / "lib" / "tsserver.js")
    return [NODE_BINARY, tsserver]


def debug(message: str):
    """Print a diagnostic line to stderr when TSREFACTOR_DEBUG is set."""
    if DEBUG:
        print(f"[tsrefactor] {message}", file=sys.stderr)
