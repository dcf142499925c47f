#!/usr/bin/env python3
"""Find references to a symbol (read-only)."""

from ..discovery import FileDiscovery, build_warning_message
from ..edits import display_name
from ..files import FileOperations
from ..guard import TSServerGuard
from ..protocol import RefactorResult
from ..tsserver import TSServerClient
from .base import failure


class FindReferencesOperation:
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

    async def execute(self, file_path: str, line: int, column: int) -> RefactorResult:
        try:
            file_path = self.file_ops.resolve_path(file_path)

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            status = await self.discovery.discover_related_files(file_path)
            body = await self.client.request("references", {
                "file": file_path,
                "line": line,
                "offset": column,
            }) or {}
            warning = build_warning_message(status, "references")

            refs = body.get("refs") or []
            if not refs:
                return RefactorResult(success=True, message=f"No references found{warning}")

            by_file: dict[str, list[dict]] = {}
            for ref in refs:
                by_file.setdefault(ref["file"], []).append(ref)

            lines = [f"Found {len(refs)} reference(s) in {len(by_file)} file(s):"]
            for path, file_refs in by_file.items():
                lines.append(f"\n📄 {display_name(path)}:")
                for ref in file_refs:
                    start = ref.get("start", {})
                    lines.append(f"  • Line {start.get('line')}: {ref.get('lineText', '').strip()}")

            return RefactorResult(success=True, message="\n".join(lines) + warning)
        except Exception as e:
            return failure("Find references failed", e, [
                "Check the position points at an identifier",
                "Ensure the file exists and is part of the TypeScript project",
            ])
