#!/usr/bin/env python3
"""Refactoring tools: rename, extract_*, inline_variable, infer_return_type."""

from ._core import mcp, get_operations, format_result


@mcp.tool()
async def rename(filePath: str, line: int, column: int, newName: str, preview: bool = False) -> str:
    """
    Rename a symbol across all files that reference it.

    Args:
        filePath: Absolute path to the file containing the symbol
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        newName: New name for the symbol
        preview: If True, report the edits without writing any file
    """
    result = await get_operations().rename.execute(filePath, line, column, newName, preview)
    return format_result(result)


async def _extract(
    kind: str,
    filePath: str,
    startLine: int | None,
    startColumn: int | None,
    endLine: int | None,
    endColumn: int | None,
    line: int | None,
    text: str | None,
    name: str | None,
    preview: bool,
) -> str:
    operation = getattr(get_operations(), f"extract_{kind}")
    result = await operation.execute(
        filePath,
        start_line=startLine,
        start_column=startColumn,
        end_line=endLine,
        end_column=endColumn,
        line=line,
        text=text,
        name=name,
        preview=preview,
    )
    return format_result(result)


@mcp.tool()
async def extract_function(
    filePath: str,
    startLine: int | None = None,
    startColumn: int | None = None,
    endLine: int | None = None,
    endColumn: int | None = None,
    line: int | None = None,
    text: str | None = None,
    name: str | None = None,
    preview: bool = False,
) -> str:
    """
    Extract the selected statements into a new function.

    Select either with line + text (the first occurrence of text on that line)
    or with the precise startLine/startColumn/endLine/endColumn span.

    Args:
        filePath: Absolute path to the file
        startLine: Selection start line (1-indexed)
        startColumn: Selection start column (1-indexed)
        endLine: Selection end line (1-indexed)
        endColumn: Selection end column (1-indexed, exclusive)
        line: Line containing text (1-indexed)
        text: Exact text to extract
        name: Name for the new function (default: generated by TypeScript)
        preview: If True, report the edits without writing any file
    """
    return await _extract("function", filePath, startLine, startColumn, endLine, endColumn, line, text, name, preview)


@mcp.tool()
async def extract_constant(
    filePath: str,
    startLine: int | None = None,
    startColumn: int | None = None,
    endLine: int | None = None,
    endColumn: int | None = None,
    line: int | None = None,
    text: str | None = None,
    name: str | None = None,
    preview: bool = False,
) -> str:
    """
    Extract an expression into a const declaration.

    Args:
        filePath: Absolute path to the file
        startLine: Selection start line (1-indexed)
        startColumn: Selection start column (1-indexed)
        endLine: Selection end line (1-indexed)
        endColumn: Selection end column (1-indexed, exclusive)
        line: Line containing text (1-indexed)
        text: Exact text to extract
        name: Name for the constant
        preview: If True, report the edits without writing any file
    """
    return await _extract("constant", filePath, startLine, startColumn, endLine, endColumn, line, text, name, preview)


@mcp.tool()
async def extract_variable(
    filePath: str,
    startLine: int | None = None,
    startColumn: int | None = None,
    endLine: int | None = None,
    endColumn: int | None = None,
    line: int | None = None,
    text: str | None = None,
    name: str | None = None,
    preview: bool = False,
) -> str:
    """
    Extract an expression into a local variable in the enclosing scope.

    Args:
        filePath: Absolute path to the file
        startLine: Selection start line (1-indexed)
        startColumn: Selection start column (1-indexed)
        endLine: Selection end line (1-indexed)
        endColumn: Selection end column (1-indexed, exclusive)
        line: Line containing text (1-indexed)
        text: Exact text to extract
        name: Name for the variable
        preview: If True, report the edits without writing any file
    """
    return await _extract("variable", filePath, startLine, startColumn, endLine, endColumn, line, text, name, preview)


@mcp.tool()
async def inline_variable(filePath: str, line: int, column: int, preview: bool = False) -> str:
    """
    Replace every use of a variable with its value and remove the declaration.

    Args:
        filePath: Absolute path to the file
        line: Line of the variable name, in its declaration or a usage (1-indexed)
        column: Column of the variable name (1-indexed)
        preview: If True, report the edits without writing any file
    """
    result = await get_operations().inline_variable.execute(filePath, line, column, preview)
    return format_result(result)


@mcp.tool()
async def infer_return_type(filePath: str, line: int, column: int, preview: bool = False) -> str:
    """
    Add the return type TypeScript infers to a function signature.

    Args:
        filePath: Absolute path to the file
        line: Line of the function name or signature (1-indexed)
        column: Column within the function name or signature (1-indexed)
        preview: If True, report the edits without writing any file
    """
    result = await get_operations().infer_return_type.execute(filePath, line, column, preview)
    return format_result(result)
