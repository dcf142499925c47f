#!/usr/bin/env python3
"""tsserver lifecycle tools: restart_tsserver, tsserver_status."""

from ._core import mcp, get_operations, format_result


@mcp.tool()
async def restart_tsserver() -> str:
    """Restart the TypeScript server, e.g. after changing tsconfig.json or installing packages."""
    return format_result(await get_operations().restart_tsserver.execute())


@mcp.tool()
async def tsserver_status() -> str:
    """Report whether tsserver is running and whether the project has finished loading."""
    return format_result(get_operations().status())
