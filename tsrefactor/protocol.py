#!/usr/bin/env python3
"""
TS Refactor - Protocol types

Value types for tsserver edits and the results returned to tool callers.
Positions are 1-based (line, offset) as tsserver reports them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TextChange:
    """A single span replacement inside one file."""
    start_line: int
    start_offset: int
    end_line: int
    end_offset: int
    new_text: str

    @classmethod
    def from_dict(cls, data: dict) -> "TextChange":
        start = data.get("start", {})
        end = data.get("end", start)
        return cls(
            start_line=start.get("line", 1),
            start_offset=start.get("offset", 1),
            end_line=end.get("line", 1),
            end_offset=end.get("offset", 1),
            new_text=data.get("newText", ""),
        )


@dataclass(frozen=True)
class FileEdit:
    """All text changes tsserver produced for one file."""
    file_name: str
    text_changes: tuple[TextChange, ...]

    @classmethod
    def from_dict(cls, data: dict) -> "FileEdit":
        return cls(
            file_name=data["fileName"],
            text_changes=tuple(TextChange.from_dict(c) for c in data.get("textChanges", [])),
        )


def parse_file_edits(raw: list[dict] | None) -> list[FileEdit]:
    """Convert a tsserver `FileCodeEdits[]` body into FileEdit values."""
    return [FileEdit.from_dict(item) for item in raw or []]


@dataclass
class EditRecord:
    line: int
    old: str
    new: str
    column: int | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"line": self.line}
        if self.column is not None:
            data["column"] = self.column
        data["old"] = self.old
        data["new"] = self.new
        return data


@dataclass
class FileChanges:
    """Human-auditable log of the edits made (or previewed) in one file."""
    file: str
    path: str
    edits: list[EditRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "path": self.path,
            "edits": [e.to_dict() for e in self.edits],
        }


@dataclass
class RefactorResult:
    success: bool
    message: str
    files_changed: list[FileChanges] = field(default_factory=list)
    next_actions: list[str] = field(default_factory=list)
    preview: dict | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "status": "success" if self.success else "error",
            "message": self.message,
            "filesChanged": [c.to_dict() for c in self.files_changed],
        }
        if self.next_actions:
            data["nextActions"] = self.next_actions
        if self.preview is not None:
            data["preview"] = self.preview
        return data


def preview_info(files_affected: int) -> dict:
    return {
        "filesAffected": files_affected,
        "estimatedTime": "< 1s",
        "command": "Run again with preview=False to apply changes",
    }
