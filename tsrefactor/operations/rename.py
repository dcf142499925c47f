#!/usr/bin/env python3
"""Rename a symbol across every file that references it."""

from ..discovery import FileDiscovery, build_warning_message
from ..files import FileOperations
from ..guard import TSServerGuard
from ..protocol import RefactorResult, preview_info
from ..tsserver import TSServerClient
from .base import apply_file_edits, count_edits, failure, rename_locs_to_file_edits


class RenameOperation:
    def __init__(
        self,
        client: TSServerClient,
        file_ops: FileOperations,
        guard: TSServerGuard,
        discovery: FileDiscovery,
    ):
        self.client = client
        self.file_ops = file_ops
        self.guard = guard
        self.discovery = discovery

    async def execute(self, file_path: str, line: int, column: int, new_name: str, preview: bool = False) -> RefactorResult:
        try:
            file_path = self.file_ops.resolve_path(file_path)

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            status = await self.discovery.discover_related_files(file_path)

            body = await self.client.request("rename", {
                "file": file_path,
                "line": line,
                "offset": column,
                "findInComments": False,
                "findInStrings": False,
            }) or {}

            info = body.get("info") or {}
            locs = body.get("locs")
            if info.get("canRename") is False or not locs:
                reason = info.get("localizedErrorMessage") or "No symbol found"
                return failure(f"❌ Cannot rename at {file_path}:{line}:{column}", reason, [
                    "Check the cursor position is on a valid identifier",
                    "Use find_references to verify the symbol exists",
                    "Ensure the file is saved and TypeScript can analyze it",
                ])

            changes = await apply_file_edits(self.file_ops, rename_locs_to_file_edits(locs, new_name), preview)
            warning = build_warning_message(status, "references")
            summary = f'"{new_name}" ({count_edits(changes)} occurrence(s) in {len(changes)} file(s))'

            if preview:
                return RefactorResult(
                    success=True,
                    message=f"Preview: Would rename to {summary}{warning}",
                    files_changed=changes,
                    preview=preview_info(len(changes)),
                )

            return RefactorResult(
                success=True,
                message=f"Renamed to {summary}{warning}",
                files_changed=changes,
            )
        except Exception as e:
            return failure("❌ Rename failed", e, [
                "Ensure the file exists and is a valid TypeScript file",
                "Check that the TypeScript project is configured correctly",
                "Verify the new name is a valid identifier",
            ])
