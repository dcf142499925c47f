#!/usr/bin/env python3
"""Multi-step workflows composed from the single-purpose operations."""

import asyncio
import os

from .. import config
from ..discovery import ProjectStatus, build_warning_message, scan_source_files
from ..edits import display_name
from ..files import FileOperations
from ..guard import TSServerGuard
from ..protocol import FileChanges, RefactorResult, preview_info
from ..tsserver import TSServerClient
from .base import failure
from .cleanup import FixAllOperation, OrganizeImportsOperation, RemoveUnusedOperation
from .moves import MoveFileOperation

TYPESCRIPT_SUFFIXES = (".ts", ".tsx")


def _add_changes(collected: list[FileChanges], changes: list[FileChanges]):
    known = {c.path for c in collected}
    collected.extend(c for c in changes if c.path not in known)


class RefactorModuleOperation:
    """move_file, then organize_imports and fix_all on every file the move touched."""

    def __init__(self, mover: MoveFileOperation, organizer: OrganizeImportsOperation, fixer: FixAllOperation):
        self.mover = mover
        self.organizer = organizer
        self.fixer = fixer

    async def execute(self, source_path: str, destination_path: str, preview: bool = False) -> RefactorResult:
        try:
            source = os.path.abspath(source_path)
            destination = os.path.abspath(destination_path)

            moved = await self.mover.execute(source, destination, preview)
            if not moved.success:
                return moved

            steps = [f"✓ Moved file to {destination}"]
            files_changed = list(moved.files_changed)

            if preview:
                return RefactorResult(
                    success=True,
                    message=(
                        "Preview: Would refactor module (move + organize + fix)\n"
                        + "\n".join(steps)
                        + "\nNext steps: organize imports, fix errors"
                    ),
                    files_changed=files_changed,
                    preview={**(moved.preview or preview_info(len(files_changed) + 1)), "estimatedTime": "< 2s"},
                )

            # Edits tsserver made to the moved file itself are recorded under its old path
            affected: dict[str, None] = {}
            for change in moved.files_changed:
                affected[destination if change.path == source else change.path] = None
            affected[destination] = None

            for title, operation in (("Organized imports", self.organizer), ("Fixed errors", self.fixer)):
                for path in affected:
                    result = await operation.execute(path)
                    if result.success and result.files_changed:
                        steps.append(f"✓ {title} in {display_name(path)}")
                        _add_changes(files_changed, result.files_changed)

            return RefactorResult(
                success=True,
                message="Refactored module successfully:\n" + "\n".join(steps),
                files_changed=files_changed,
            )
        except Exception as e:
            return failure("Refactor module failed", e, [
                "Ensure source file exists",
                "Check destination path is valid",
                "Verify TypeScript project is configured correctly",
            ])


class CleanupCodebaseOperation:
    """Remove unused code and organize imports in every TypeScript file under a directory.

    Each file is handled independently. In preview mode both steps are
    computed against the file as it is on disk, so the organize-imports
    preview does not reflect the removals.
    """

    def __init__(
        self,
        client: TSServerClient,
        guard: TSServerGuard,
        organizer: OrganizeImportsOperation,
        remover: RemoveUnusedOperation,
        file_ops: FileOperations,
        scan_timeout: float = config.SCAN_TIMEOUT,
    ):
        self.client = client
        self.guard = guard
        self.organizer = organizer
        self.remover = remover
        self.file_ops = file_ops
        self.scan_timeout = scan_timeout

    async def execute(self, directory: str, remove_unused: bool = True, preview: bool = False) -> RefactorResult:
        try:
            directory = self.file_ops.resolve_path(directory)
            if not os.path.isdir(directory):
                return failure("Cleanup codebase failed", f"not a directory: {directory}", [
                    "Check the directory path is correct",
                ])

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            found, timed_out = await asyncio.to_thread(scan_source_files, directory, self.scan_timeout)
            files = [f for f in found if f.endswith(TYPESCRIPT_SUFFIXES)]
            if not files:
                return failure(f"No TypeScript files found in {directory}", "nothing to clean up", [
                    "Check the directory path is correct",
                    "Ensure directory contains .ts or .tsx files",
                    "Verify you have read permissions",
                ])

            steps = [self.remover] if remove_unused else []
            steps.append(self.organizer)

            files_changed: list[FileChanges] = []
            touched: dict[str, None] = {}
            errors = []
            for path in files:
                for operation in steps:
                    result = await operation.execute(path, preview)
                    if not result.success:
                        errors.append(f"{display_name(path)}: {result.message.splitlines()[0]}")
                        break
                    files_changed.extend(result.files_changed)
                    if result.files_changed:
                        touched[path] = None

            warning = build_warning_message(ProjectStatus(self.client.is_project_loaded(), timed_out), "cleanup")
            failed = ""
            if errors:
                failed = "\n\nFailed:\n" + "\n".join(f"  • {e}" for e in errors)

            if preview:
                return RefactorResult(
                    success=True,
                    message=f"Preview: Would clean up {len(touched)} of {len(files)} TypeScript file(s){failed}{warning}",
                    files_changed=files_changed,
                    preview=preview_info(len(touched)),
                )

            done = ["✓ Removed unused code and organized imports" if remove_unused else "✓ Organized imports"]
            done.append(f"✓ Changed {len(touched)} file(s)")
            return RefactorResult(
                success=True,
                message=(
                    "Cleanup completed successfully:\n"
                    + "\n".join(done)
                    + f"\nProcessed {len(files)} TypeScript file(s){failed}{warning}"
                ),
                files_changed=files_changed,
            )
        except Exception as e:
            return failure("Cleanup codebase failed", e, [
                "Ensure directory exists and is readable",
                "Check TypeScript project is configured",
                "Verify files can be analyzed by TypeScript",
            ])
