#!/usr/bin/env python3
"""
TS Refactor MCP Tools Package

Exposes tsserver-backed TypeScript refactorings to AI agents over MCP stdio.

A single tsserver process is shared by every tool call; it is spawned on
first use and killed when the MCP server exits.
"""

import argparse
import os
import sys

# Import core components first
from ._core import (
    mcp,
    configure,
    get_operations,
    get_workspace,
    format_result,
    cleanup,
)

# Import all tool modules to register their @mcp.tool() decorators
from . import navigation
from . import refactoring
from . import fixes
from . import files
from . import tsserver

__all__ = [
    "mcp",
    "configure",
    "get_operations",
    "format_result",
    "main",
]


def main(argv: list[str] | None = None):
    """Run the MCP server."""
    parser = argparse.ArgumentParser(prog="tsrefactor-mcp", description="TypeScript refactoring MCP server")
    parser.add_argument("--workspace", default=get_workspace(), help="Project root containing tsconfig.json")
    args = parser.parse_args(argv)

    workspace = os.path.abspath(args.workspace)
    configure(workspace)

    print("Starting TS Refactor MCP Server", file=sys.stderr)
    print(f"  Workspace: {workspace}", file=sys.stderr)
    if not os.path.isfile(os.path.join(workspace, "tsconfig.json")):
        print("  Warning: no tsconfig.json in workspace; tsserver will use inferred projects", file=sys.stderr)

    try:
        mcp.run()
    finally:
        cleanup()


if __name__ == "__main__":
    main()
