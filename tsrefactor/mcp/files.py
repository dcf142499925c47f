#!/usr/bin/env python3
"""File tools: move_file, rename_file, batch_move_files, refactor_module. Imports are updated everywhere."""

from ._core import mcp, get_operations, format_result


@mcp.tool()
async def move_file(sourcePath: str, destinationPath: str, preview: bool = False) -> str:
    """
    Move a file and update every import that references it.

    Args:
        sourcePath: Absolute path of the file to move
        destinationPath: Absolute destination path (directories are created)
        preview: If True, report import updates without touching the disk
    """
    result = await get_operations().move_file.execute(sourcePath, destinationPath, preview)
    return format_result(result)


@mcp.tool()
async def rename_file(sourcePath: str, name: str, preview: bool = False) -> str:
    """
    Rename a file in place and update every import that references it.

    Args:
        sourcePath: Absolute path of the file to rename
        name: New file name (no directory part)
        preview: If True, report import updates without touching the disk
    """
    result = await get_operations().rename_file.execute(sourcePath, name, preview)
    return format_result(result)


@mcp.tool()
async def batch_move_files(files: list[str], targetFolder: str, preview: bool = False) -> str:
    """
    Move several files into one folder, updating imports for each.

    Args:
        files: Absolute paths of the files to move
        targetFolder: Absolute path of the destination folder
        preview: If True, report import updates without touching the disk
    """
    result = await get_operations().batch_move_files.execute(files, targetFolder, preview)
    return format_result(result)


@mcp.tool()
async def refactor_module(sourcePath: str, destinationPath: str, preview: bool = False) -> str:
    """
    Move a module, then organize imports and apply fixes in every file the move touched.

    Args:
        sourcePath: Absolute path of the module to move
        destinationPath: Absolute destination path
        preview: If True, report the move's import updates only
    """
    result = await get_operations().refactor_module.execute(sourcePath, destinationPath, preview)
    return format_result(result)
