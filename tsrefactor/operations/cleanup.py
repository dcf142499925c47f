#!/usr/bin/env python3
"""Single-file cleanups: organize imports, apply all code fixes, remove unused code."""

from ..edits import apply_edits, build_file_changes, sort_edits
from ..files import FileOperations
from ..guard import TSServerGuard
from ..indentation import IndentationDetector, configure_for_file
from ..protocol import RefactorResult, TextChange, parse_file_edits, preview_info
from ..tsserver import TSServerClient
from .base import failure

UNUSED_FIX_IDS = {"unusedIdentifier_delete", "unusedIdentifier_deleteImports"}


class OrganizeImportsOperation:
    def __init__(
        self,
        client: TSServerClient,
        file_ops: FileOperations,
        guard: TSServerGuard,
        detector: IndentationDetector,
    ):
        self.client = client
        self.file_ops = file_ops
        self.guard = guard
        self.detector = detector

    async def execute(self, file_path: str, preview: bool = False) -> RefactorResult:
        try:
            file_path = self.file_ops.resolve_path(file_path)

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            await self.client.open_file(file_path)

            async with self.file_ops.locked(file_path):
                original = self.file_ops.read_lines(file_path)
                await configure_for_file(self.client, file_path, original, self.detector)

                body = await self.client.request("organizeImports", {
                    "scope": {"type": "file", "args": {"file": file_path}},
                })
                text_changes = [
                    c for fe in parse_file_edits(body) if fe.file_name == file_path for c in fe.text_changes
                ]
                if not text_changes:
                    return RefactorResult(success=True, message="No import changes needed")

                ordered = sort_edits(text_changes)
                record = build_file_changes(original, ordered, file_path)
                if preview:
                    return RefactorResult(
                        success=True,
                        message="Preview: Would organize imports",
                        files_changed=[record],
                        preview=preview_info(1),
                    )
                self.file_ops.write_lines(file_path, apply_edits(original, ordered))

            return RefactorResult(success=True, message="Organized imports", files_changed=[record])
        except Exception as e:
            return failure("Organize imports failed", e, [
                "Ensure the file exists and has valid import statements",
                "Check that all imported modules can be resolved",
                "Verify TypeScript configuration is correct",
            ])


class FixAllOperation:
    """Collect every fix id offered for the file's diagnostics and apply the combined fixes."""

    diagnostic_commands = ("semanticDiagnosticsSync",)
    allowed_fix_ids: set[str] | None = None
    done_message = "Applied {count} fix(es)"
    preview_message = "Preview: Would apply {count} fix(es)"
    failure_title = "Fix all failed"

    def __init__(self, client: TSServerClient, file_ops: FileOperations, guard: TSServerGuard):
        self.client = client
        self.file_ops = file_ops
        self.guard = guard

    async def _collect_fix_ids(self, file_path: str) -> list[str]:
        fix_ids: dict[str, None] = {}

        for command in self.diagnostic_commands:
            diagnostics = await self.client.request(command, {
                "file": file_path,
                "includeLinePosition": True,
            }) or []

            for diagnostic in diagnostics:
                start = diagnostic.get("startLocation") or {"line": 1, "offset": 1}
                end = diagnostic.get("endLocation") or start
                fixes = await self.client.request("getCodeFixes", {
                    "file": file_path,
                    "startLine": start["line"],
                    "startOffset": start["offset"],
                    "endLine": end["line"],
                    "endOffset": end["offset"],
                    "errorCodes": [diagnostic.get("code")],
                }) or []
                for fix in fixes:
                    fix_id = fix.get("fixId")
                    if fix_id and (self.allowed_fix_ids is None or fix_id in self.allowed_fix_ids):
                        fix_ids[fix_id] = None

        return list(fix_ids)

    async def execute(self, file_path: str, preview: bool = False) -> RefactorResult:
        try:
            file_path = self.file_ops.resolve_path(file_path)

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            await self.client.open_file(file_path)

            fix_ids = await self._collect_fix_ids(file_path)
            if not fix_ids:
                return RefactorResult(success=True, message="No auto-fixable errors found")

            text_changes: list[TextChange] = []
            for fix_id in fix_ids:
                combined = await self.client.request("getCombinedCodeFix", {
                    "scope": {"type": "file", "args": {"file": file_path}},
                    "fixId": fix_id,
                }) or {}
                for file_edit in parse_file_edits(combined.get("changes")):
                    if file_edit.file_name == file_path:
                        text_changes.extend(file_edit.text_changes)

            if not text_changes:
                return RefactorResult(success=True, message="No fixes applied")

            async with self.file_ops.locked(file_path):
                original = self.file_ops.read_lines(file_path)
                ordered = sort_edits(text_changes)
                record = build_file_changes(original, ordered, file_path)
                if preview:
                    return RefactorResult(
                        success=True,
                        message=self.preview_message.format(count=len(ordered)),
                        files_changed=[record],
                        preview=preview_info(1),
                    )
                self.file_ops.write_lines(file_path, apply_edits(original, ordered))

            return RefactorResult(
                success=True,
                message=self.done_message.format(count=len(ordered)),
                files_changed=[record],
                next_actions=["organize_imports - Clean up imports after fixes"],
            )
        except Exception as e:
            return failure(self.failure_title, e, [
                "Ensure the file exists and is a valid TypeScript file",
                "Check that TypeScript can compile the file",
                "Some errors may not be auto-fixable",
            ])


class RemoveUnusedOperation(FixAllOperation):
    # Unused declarations are reported as suggestions unless noUnusedLocals is on
    diagnostic_commands = ("semanticDiagnosticsSync", "suggestionDiagnosticsSync")
    allowed_fix_ids = UNUSED_FIX_IDS
    done_message = "Removed unused code ({count} edit(s))"
    preview_message = "Preview: Would remove unused code ({count} edit(s))"
    failure_title = "Remove unused failed"
