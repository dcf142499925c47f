#!/usr/bin/env python3
"""Helpers shared by the refactoring operations."""

import os
from collections.abc import Callable

from ..edits import apply_edits, build_file_changes, sort_edits
from ..files import FileOperations
from ..protocol import FileChanges, FileEdit, RefactorResult, TextChange

# (path, original_lines, change) -> change
ChangeTransform = Callable[[str, list[str], TextChange], TextChange]


def failure(title: str, error: Exception | str, hints: list[str] | None = None) -> RefactorResult:
    """Failure result naming what went wrong and how to recover."""
    message = f"{title}: {error}"
    if hints:
        steps = "\n".join(f"  {i}. {hint}" for i, hint in enumerate(hints, 1))
        message += f"\n\nTry:\n{steps}"
    return RefactorResult(success=False, message=message)


def group_by_file(file_edits: list[FileEdit]) -> dict[str, list[TextChange]]:
    grouped: dict[str, list[TextChange]] = {}
    for file_edit in file_edits:
        grouped.setdefault(file_edit.file_name, []).extend(file_edit.text_changes)
    return grouped


async def apply_file_edits(
    file_ops: FileOperations,
    file_edits: list[FileEdit],
    preview: bool,
    transform: ChangeTransform | None = None,
) -> list[FileChanges]:
    """Apply tsserver edits file by file and return the change records.

    In preview mode the records are computed the same way but nothing is written.
    """
    changes = []
    for path, text_changes in group_by_file(file_edits).items():
        async with file_ops.locked(path):
            original = file_ops.read_lines(path) if os.path.exists(path) else [""]
            if transform:
                text_changes = [transform(path, original, c) for c in text_changes]
            ordered = sort_edits(text_changes)
            record = build_file_changes(original, ordered, path)
            if not preview:
                file_ops.write_lines(path, apply_edits(original, ordered))
        changes.append(record)
    return changes


def rename_locs_to_file_edits(locs: list[dict], new_name: str) -> list[FileEdit]:
    """Turn a tsserver rename body's `locs` into edits that insert `new_name`."""
    file_edits = []
    for file_loc in locs:
        text_changes = []
        for span in file_loc.get("locs", []):
            text = f"{span.get('prefixText', '')}{new_name}{span.get('suffixText', '')}"
            text_changes.append(TextChange.from_dict({**span, "newText": text}))
        file_edits.append(FileEdit(file_name=file_loc["file"], text_changes=tuple(text_changes)))
    return file_edits


def count_edits(changes: list[FileChanges]) -> int:
    return sum(len(c.edits) for c in changes)
