#!/usr/bin/env python3
"""Move / rename files and update every import that points at them."""

import os

from ..discovery import FileDiscovery, build_warning_message
from ..files import FileOperations
from ..guard import TSServerGuard
from ..protocol import FileChanges, RefactorResult, parse_file_edits, preview_info
from ..tsserver import TSServerClient
from .base import apply_file_edits, failure

MOVE_HINTS = [
    "Ensure source file exists and destination path is valid",
    "Check that destination directory is writable",
    "Verify no other file exists at destination path",
]


class MoveFileOperation:
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

    async def perform_move(self, source: str, destination: str, preview: bool) -> RefactorResult:
        """Apply tsserver's import updates for the rename, then move the file."""
        body = await self.client.request("getEditsForFileRename", {
            "oldFilePath": source,
            "newFilePath": destination,
        })
        changes = await apply_file_edits(self.file_ops, parse_file_edits(body), preview)

        if preview:
            return RefactorResult(
                success=True,
                message=f"Preview: Would move file and update {len(changes)} file(s)",
                files_changed=changes,
                preview=preview_info(len(changes) + 1),
            )

        try:
            async with self.file_ops.locked(source):
                self.file_ops.move(source, destination)
        except OSError as e:
            written = ", ".join(c.path for c in changes) or "none"
            result = failure(
                "❌ Move file failed",
                f"{e}\n\nImport updates were already written (files: {written}) and now point at "
                f"{destination}, which does not exist",
                [
                    f"Fix the problem and move {source} to {destination} by hand",
                    "Or revert the import changes listed above",
                ],
            )
            result.files_changed = changes
            return result

        if not changes:
            return RefactorResult(
                success=True,
                message="File moved (no import updates needed)",
                next_actions=["find_references - Verify no references were missed"],
            )
        return RefactorResult(
            success=True,
            message=f"Moved file and updated imports in {len(changes)} file(s)",
            files_changed=changes,
            next_actions=[
                "organize_imports - Clean up import statements",
                "fix_all - Fix any errors from the move",
            ],
        )

    async def execute(self, source_path: str, destination_path: str, preview: bool = False) -> RefactorResult:
        try:
            source = self.file_ops.resolve_path(source_path)
            destination = self.file_ops.resolve_path(destination_path)
            if not os.path.isfile(source):
                return failure("❌ Move file failed", f"source file not found: {source}", MOVE_HINTS)
            if os.path.exists(destination):
                return failure("❌ Move file failed", f"destination already exists: {destination}", MOVE_HINTS)

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            status = await self.discovery.discover_related_files(source)
            result = await self.perform_move(source, destination, preview)
            result.message += build_warning_message(status, "import updates")
            return result
        except Exception as e:
            return failure("❌ Move file failed", e, MOVE_HINTS)


class RenameFileOperation:
    """Rename a file in place (a move within its own directory)."""

    def __init__(self, mover: MoveFileOperation):
        self.mover = mover

    async def execute(self, source_path: str, name: str, preview: bool = False) -> RefactorResult:
        if not name or os.sep in name or (os.altsep and os.altsep in name):
            return failure("Rename file failed", f"invalid file name {name!r}", [
                "Pass a bare file name; use move_file to change directories",
            ])
        source = os.path.abspath(source_path)
        return await self.mover.execute(source, os.path.join(os.path.dirname(source), name), preview)


class BatchMoveFilesOperation:
    def __init__(self, mover: MoveFileOperation, guard: TSServerGuard, client: TSServerClient):
        self.mover = mover
        self.guard = guard
        self.client = client

    async def execute(self, files: list[str], target_folder: str, preview: bool = False) -> RefactorResult:
        if not files:
            return failure("Batch move failed", "at least one file must be provided")
        try:
            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            target = os.path.abspath(target_folder)
            sources = [os.path.abspath(f) for f in files]
            # Open every source first so tsserver tracks imports between them
            for source in sources:
                await self.client.open_file(source)

            merged: dict[str, FileChanges] = {}
            moved = 0
            errors = []
            for source in sources:
                result = await self.mover.execute(source, os.path.join(target, os.path.basename(source)), preview)
                if not result.success:
                    errors.append(f"{os.path.basename(source)}: {result.message.splitlines()[0]}")
                    continue
                moved += 1
                for change in result.files_changed:
                    if change.path in merged:
                        merged[change.path].edits.extend(change.edits)
                    else:
                        merged[change.path] = change

            verb = "Would move" if preview else "Moved"
            message = f"{verb} {moved}/{len(sources)} file(s) to {target}"
            if errors:
                message += "\n\nFailed:\n" + "\n".join(f"  • {e}" for e in errors)
            return RefactorResult(
                success=moved > 0,
                message=message,
                files_changed=list(merged.values()),
                preview=preview_info(len(merged) + moved) if preview else None,
            )
        except Exception as e:
            return failure("Batch move failed", e, [
                "Ensure all source files exist",
                "Check that the target folder is writable",
            ])
