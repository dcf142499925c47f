#!/usr/bin/env python3
"""
TS Refactor - Edit application

Pure functions that turn tsserver text changes into new file content and an
auditable change record. Edits are always applied bottom-up (see sort_edits)
so an applied edit never shifts the position of one still pending.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass

from .protocol import EditRecord, FileChanges, TextChange


def sort_edits(changes: Iterable[TextChange]) -> list[TextChange]:
    """Order by descending start line, then descending start offset."""
    return sorted(changes, key=lambda c: (c.start_line, c.start_offset), reverse=True)


def apply_edits(lines: list[str], changes: Iterable[TextChange]) -> list[str]:
    """Apply already-sorted changes to a copy of `lines`."""
    result = list(lines)

    for change in changes:
        start_line = change.start_line - 1
        end_line = change.end_line - 1
        start_offset = change.start_offset - 1
        end_offset = change.end_offset - 1

        if start_line == end_line:
            line = result[start_line]
            result[start_line] = line[:start_offset] + change.new_text + line[end_offset:]
        else:
            before = result[start_line][:start_offset]
            after = result[end_line][end_offset:]
            result[start_line:end_line + 1] = [before + change.new_text + after]

    return result


def extract_text(lines: list[str], change: TextChange) -> str:
    """Text currently covered by `change`'s span."""
    start_line = change.start_line - 1
    end_line = change.end_line - 1
    start_offset = change.start_offset - 1
    end_offset = change.end_offset - 1

    if start_line == end_line:
        return lines[start_line][start_offset:end_offset]

    parts = [lines[start_line][start_offset:]]
    parts.extend(lines[start_line + 1:end_line])
    parts.append(lines[end_line][:end_offset])
    return "\n".join(parts)


def display_name(path: str) -> str:
    return os.path.basename(path) or path


def build_file_changes(original_lines: list[str], changes: Iterable[TextChange], path: str) -> FileChanges:
    """Record (line, column, old, new) per change, reading old text from the unmodified lines."""
    edits = [
        EditRecord(
            line=change.start_line,
            column=change.start_offset,
            old=extract_text(original_lines, change),
            new=change.new_text,
        )
        for change in changes
    ]
    return FileChanges(file=display_name(path), path=path, edits=edits)


@dataclass(frozen=True)
class TextPosition:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


class PositionError(ValueError):
    pass


def find_text_position(lines: list[str], line: int, text: str) -> TextPosition:
    """Locate the first occurrence of `text` on 1-based `line`."""
    index = line - 1
    if index < 0 or index >= len(lines):
        raise PositionError(f"Line {line} is out of range (file has {len(lines)} lines)")

    content = lines[index]
    column = content.find(text)
    if column == -1:
        raise PositionError(
            f'Text "{text}" not found on line {line}\n'
            f"\n"
            f"Line content: {content}\n"
            f"\n"
            f"Try:\n"
            f"  1. Check the text matches exactly (case-sensitive)\n"
            f"  2. Ensure you're on the correct line"
        )

    return TextPosition(
        start_line=line,
        start_column=column + 1,
        end_line=line,
        end_column=column + len(text) + 1,
    )
