#!/usr/bin/env python3
"""
Core utilities shared across all TS Refactor MCP tools.
"""

import sys

from mcp.server.fastmcp import FastMCP
from toon import encode as toon_encode

from .. import config
from ..operations import Operations
from ..protocol import RefactorResult
from ..tsserver import TSServerClient

# Shared MCP instance
mcp = FastMCP("tsrefactor")

# One tsserver per MCP server process, started lazily by the readiness guard
_workspace: str = config.WORKSPACE
_client: TSServerClient | None = None
_operations: Operations | None = None


def configure(workspace: str):
    """Point the tools at a workspace. Must run before the first tool call."""
    global _workspace, _client, _operations
    _workspace = workspace
    _client = None
    _operations = None


def get_operations() -> Operations:
    """Get or create the operations bound to the shared client."""
    global _client, _operations
    if _operations is None:
        _client = TSServerClient()
        _operations = Operations(_client, _workspace)
    return _operations


def get_workspace() -> str:
    return _workspace


def format_result(result: RefactorResult | dict) -> str:
    """Format result as TOON for token efficiency."""
    if isinstance(result, RefactorResult):
        if not result.success:
            return f"Error: {result.message}"
        result = result.to_dict()
    if "error" in result:
        return f"Error: {result['error']}"
    return toon_encode(result)


def cleanup():
    """Kill tsserver on shutdown; the event loop that spawned it is already gone."""
    if _client is None or _client.process is None:
        return
    process = _client.process
    if process.returncode is not None:
        return
    try:
        process.kill()
        print(f"  Stopped TSServer (PID {process.pid})", file=sys.stderr)
    except ProcessLookupError:
        pass
