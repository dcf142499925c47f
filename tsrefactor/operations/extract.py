#!/usr/bin/env python3
"""
Extract function / constant / variable.

tsserver decides what can be extracted; this module picks the action, fixes
the indentation of the generated declaration and, when a custom name was
requested, renames the generated name through tsserver.
"""

import re
from dataclasses import dataclass, replace

from ..edits import PositionError, find_text_position
from ..files import FileOperations
from ..guard import TSServerGuard
from ..indentation import IndentationFixer
from ..protocol import FileChanges, RefactorResult, TextChange, parse_file_edits, preview_info
from ..tsserver import TSServerClient
from .base import apply_file_edits, failure, rename_locs_to_file_edits


@dataclass(frozen=True)
class ExtractKind:
    label: str
    refactor_kind: str
    declaration: re.Pattern

    def pick_action(self, actions: list[dict]) -> dict | None:
        if self.label == "function":
            for action in actions:
                description = action.get("description", "")
                if "function in module scope" in description or "Extract to function" in description:
                    return action
            return actions[0] if actions else None

        for action in actions:
            if action.get("name", "").startswith("constant_scope_"):
                return action
        if self.label == "constant":
            for action in actions:
                description = action.get("description", "").lower()
                if "constant" in description or "enclosing" in description:
                    return action
        return None


FUNCTION = ExtractKind("function", "refactor.extract.function", re.compile(r"function\s+(\w+)\s*\("))
CONSTANT = ExtractKind("constant", "refactor.extract.constant", re.compile(r"const\s+(\w+)\s*="))
VARIABLE = ExtractKind("variable", "refactor.extract.constant", re.compile(r"const\s+(\w+)\s*="))


def find_generated_name(kind: ExtractKind, changes: list[TextChange]) -> str | None:
    for change in changes:
        match = kind.declaration.search(change.new_text)
        if match:
            return match.group(1)
    return None


def rename_in_records(records: list[FileChanges], old_name: str, new_name: str, path: str):
    """Show the custom name in the change log for `path`."""
    pattern = re.compile(rf"\b{re.escape(old_name)}\b")
    for record in records:
        if record.path != path:
            continue
        for edit in record.edits:
            edit.new = pattern.sub(new_name, edit.new)


class ExtractOperation:
    def __init__(
        self,
        kind: ExtractKind,
        client: TSServerClient,
        file_ops: FileOperations,
        guard: TSServerGuard,
        fixer: IndentationFixer,
    ):
        self.kind = kind
        self.client = client
        self.file_ops = file_ops
        self.guard = guard
        self.fixer = fixer

    def _fix_indentation(self, path: str, original: list[str], change: TextChange) -> TextChange:
        if self.kind is FUNCTION:
            text = self.fixer.fix_function_indentation(change.new_text, original)
        elif self.kind is VARIABLE:
            text = self.fixer.fix_variable_indentation(change.new_text, original, change.start_line - 1)
        else:
            text = self.fixer.fix_constant_indentation(change.new_text, original, change.start_line - 1)
        return replace(change, new_text=text) if text != change.new_text else change

    def _resolve_span(
        self,
        file_path: str,
        line: int | None,
        text: str | None,
        span: tuple[int | None, int | None, int | None, int | None],
    ) -> tuple[int, int, int, int]:
        if line is not None and text is not None:
            pos = find_text_position(self.file_ops.read_lines(file_path), line, text)
            return pos.start_line, pos.start_column, pos.end_line, pos.end_column
        if any(v is None for v in span):
            raise PositionError(
                "Must provide either (line + text) or (startLine + startColumn + endLine + endColumn)"
            )
        start_line, start_column, end_line, end_column = span
        if end_line < start_line:
            raise PositionError("End line must be greater than or equal to start line")
        return start_line, start_column, end_line, end_column

    async def _apply_custom_name(self, file_path: str, generated: str, name: str):
        """Rename the generated declaration; the file must already be written.

        tsserver's renameLocation is not used: re-indenting shifts its offsets.
        """
        await self.client.open_file(file_path)

        location = None
        for index, content in enumerate(self.file_ops.read_lines(file_path)):
            match = self.kind.declaration.search(content)
            if match and match.group(1) == generated:
                location = {"line": index + 1, "offset": match.start(1) + 1}
                break
        if not location:
            return

        body = await self.client.request("rename", {
            "file": file_path,
            "line": location["line"],
            "offset": location["offset"],
            "findInComments": False,
            "findInStrings": False,
        }) or {}
        if body.get("locs"):
            await apply_file_edits(self.file_ops, rename_locs_to_file_edits(body["locs"], name), preview=False)

    async def execute(
        self,
        file_path: str,
        start_line: int | None = None,
        start_column: int | None = None,
        end_line: int | None = None,
        end_column: int | None = None,
        line: int | None = None,
        text: str | None = None,
        name: str | None = None,
        preview: bool = False,
    ) -> RefactorResult:
        label = self.kind.label
        try:
            file_path = self.file_ops.resolve_path(file_path)
            try:
                start_line, start_column, end_line, end_column = self._resolve_span(
                    file_path, line, text, (start_line, start_column, end_line, end_column)
                )
            except PositionError as e:
                return RefactorResult(success=False, message=str(e))
            where = f"{file_path}:{start_line}:{start_column}"

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            await self.client.open_file(file_path)
            selection = {
                "file": file_path,
                "startLine": start_line,
                "startOffset": start_column,
                "endLine": end_line,
                "endOffset": end_column,
            }

            refactors = await self.client.request("getApplicableRefactors", {
                **selection,
                "triggerReason": "invoked",
                "kind": self.kind.refactor_kind,
            }) or []
            refactor = next(
                (r for r in refactors if r.get("name") in ("Extract Symbol", f"Extract to {label}")),
                None,
            )
            if refactor is None:
                available = ", ".join(r.get("name", "?") for r in refactors) or "none"
                return failure(f"Cannot extract {label} at {where}", f"available refactorings: {available}", [
                    "Select a complete expression or statement",
                    "Ensure the selection is syntactically valid",
                ])

            action = self.kind.pick_action(refactor.get("actions") or [])
            if action is None:
                return failure(f"No {label} extraction action at {where}", "tsserver offered none", [
                    "Try a different selection",
                    "Ensure the value is eligible for extraction",
                ])

            edit_info = await self.client.request("getEditsForRefactor", {
                **selection,
                "refactor": refactor["name"],
                "action": action["name"],
            }) or {}
            file_edits = parse_file_edits(edit_info.get("edits"))
            if not file_edits:
                return failure(f"No edits generated for extract {label} at {where}", "empty edit set", [
                    "Check that the file is saved and syntactically valid",
                    "Verify the selection is a valid expression",
                ])

            records = await apply_file_edits(self.file_ops, file_edits, preview, transform=self._fix_indentation)

            generated = find_generated_name(
                self.kind, [c for fe in file_edits if fe.file_name == file_path for c in fe.text_changes]
            )
            named = f' "{name}"' if name else ""

            if name and generated and generated != name:
                rename_in_records(records, generated, name, file_path)
                if not preview:
                    await self._apply_custom_name(file_path, generated, name)

            if preview:
                return RefactorResult(
                    success=True,
                    message=f"Preview: Would extract {label}{named}",
                    files_changed=records,
                    preview=preview_info(len(records)),
                )

            return RefactorResult(
                success=True,
                message=f"Extracted {label}{named or (f' {generated}' if generated else '')}",
                files_changed=records,
                next_actions=["organize_imports - Clean up imports if needed"],
            )
        except Exception as e:
            return failure(f"Extract {label} failed", e, [
                "Check that the file is saved and syntactically valid",
                "Ensure TypeScript can parse the selection",
                "Verify the selection is a complete expression or statement",
            ])
