#!/usr/bin/env python3
"""Navigation tools: find_references."""

from ._core import mcp, get_operations, format_result


@mcp.tool()
async def find_references(filePath: str, line: int, column: int) -> str:
    """
    Find all references to a symbol across the project.

    Files that import the symbol's file are opened first so references in
    not-yet-indexed files are found too.

    Args:
        filePath: Absolute path to the TypeScript/JavaScript file
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    result = await get_operations().find_references.execute(filePath, line, column)
    return format_result(result)
