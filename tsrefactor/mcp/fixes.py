#!/usr/bin/env python3
"""Cleanup tools: organize_imports, fix_all, remove_unused and the project-wide cleanup_codebase."""

from ._core import mcp, get_operations, format_result


@mcp.tool()
async def organize_imports(filePath: str, preview: bool = False) -> str:
    """
    Sort imports and drop unused ones, keeping the file's indentation style.

    Args:
        filePath: Absolute path to the file
        preview: If True, report the edits without writing the file
    """
    return format_result(await get_operations().organize_imports.execute(filePath, preview))


@mcp.tool()
async def fix_all(filePath: str, preview: bool = False) -> str:
    """
    Apply every auto-fix TypeScript offers for the file's errors.

    Args:
        filePath: Absolute path to the file
        preview: If True, report the edits without writing the file
    """
    return format_result(await get_operations().fix_all.execute(filePath, preview))


@mcp.tool()
async def remove_unused(filePath: str, preview: bool = False) -> str:
    """
    Remove unused variables, parameters and imports.

    Args:
        filePath: Absolute path to the file
        preview: If True, report the edits without writing the file
    """
    return format_result(await get_operations().remove_unused.execute(filePath, preview))


@mcp.tool()
async def cleanup_codebase(directory: str, removeUnused: bool = True, preview: bool = False) -> str:
    """
    Remove unused code and organize imports in every .ts/.tsx file under a directory.

    node_modules, dist, build, dot-directories and .d.ts files are skipped.

    Args:
        directory: Absolute path of the directory to clean
        removeUnused: Remove unused variables, parameters and imports before organizing
        preview: If True, report the edits without writing any file
    """
    result = await get_operations().cleanup_codebase.execute(directory, removeUnused, preview)
    return format_result(result)
