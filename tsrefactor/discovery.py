#!/usr/bin/env python3
"""
TS Refactor - Dependent-file discovery

Before a rename or move, open the target files in tsserver along with every
file that references them, so cross-file edits are not silently dropped.
When tsserver cannot answer yet, fall back to a time-boxed filesystem scan
and open whatever it does not already know about.
"""

import asyncio
import os
import re
import time
from dataclasses import dataclass

from . import config
from .tsserver import TSServerClient, TSServerError

SOURCE_FILE_RE = re.compile(r"\.(ts|tsx|js|jsx|mjs|cjs)$")
SKIPPED_DIRS = {"node_modules", "dist", "build"}


@dataclass(frozen=True)
class ProjectStatus:
    is_fully_loaded: bool
    did_scan_timeout: bool


def _is_source_file(name: str) -> bool:
    return bool(SOURCE_FILE_RE.search(name)) and not name.endswith(".d.ts")


def scan_source_files(root: str, timeout: float = config.SCAN_TIMEOUT) -> tuple[list[str], bool]:
    """Depth-first walk for TS/JS sources under `root`.

    Skips dependency/build directories, dot-directories and declaration
    files. Returns (files, timed_out); a timeout returns what was found so far.
    """
    files: list[str] = []
    started = time.monotonic()
    timed_out = False

    def scan(directory: str):
        nonlocal timed_out
        if time.monotonic() - started > timeout:
            timed_out = True
            return
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            config.debug(f"Failed to scan directory {directory}: {e}")
            return

        for entry in entries:
            if time.monotonic() - started > timeout:
                timed_out = True
                return
            if entry.is_dir(follow_symlinks=False):
                if entry.name in SKIPPED_DIRS or entry.name.startswith("."):
                    continue
                scan(entry.path)
                if timed_out:
                    return
            elif entry.is_file() and _is_source_file(entry.name):
                files.append(entry.path)

    scan(root)
    elapsed = time.monotonic() - started
    state = "incomplete (timeout)" if timed_out else "complete"
    config.debug(f"Filesystem scan {state}: {len(files)} files in {elapsed:.2f}s")
    return files, timed_out


def build_warning_message(status: ProjectStatus, context: str) -> str:
    """Caveat text for results produced while indexing or discovery was incomplete."""
    warning = ""

    if not status.is_fully_loaded:
        warning += f"\n\nWarning: TypeScript is still indexing the project. Some {context} may have been missed."

    if status.did_scan_timeout:
        warning += (
            "\n\nWarning: File discovery timed out. Some files may not have been scanned. "
            f"{context[:1].upper()}{context[1:]} might be incomplete."
        )

    if warning:
        warning += " If results seem incomplete, try running the operation again."

    return warning


class FileDiscovery:
    def __init__(
        self,
        client: TSServerClient,
        scan_timeout: float = config.SCAN_TIMEOUT,
        max_attempts: int = config.INDEX_ATTEMPTS,
        poll_interval: float = config.POLL_INTERVAL,
    ):
        self.client = client
        self.scan_timeout = scan_timeout
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self.last_scan_timed_out = False

    async def discover_related_files(self, paths: str | list[str]) -> ProjectStatus:
        """Open `paths` and the files that reference them; report how complete that was."""
        targets = [paths] if isinstance(paths, str) else list(paths)
        self.last_scan_timed_out = False

        for path in targets:
            await self.client.open_file(path)

        try:
            await self._open_importing_files(targets)
        except Exception as e:
            # Warnings in the result tell the user discovery was partial
            config.debug(f"File discovery failed: {e}")

        return ProjectStatus(
            is_fully_loaded=self.client.is_project_loaded(),
            did_scan_timeout=self.last_scan_timed_out,
        )

    async def wait_for_file_indexing(self, path: str) -> dict | None:
        """Poll `fileReferences` until tsserver can answer for `path`."""
        for attempt in range(self.max_attempts):
            try:
                refs = await self.client.request("fileReferences", {"file": path})
            except TSServerError:
                refs = None
            if refs is not None:
                config.debug(f"File indexed after {attempt + 1} attempt(s): {path}")
                return refs
            await asyncio.sleep(self.poll_interval)
        return None

    async def _open_importing_files(self, targets: list[str]):
        importing: dict[str, None] = {}  # ordered set

        for path in targets:
            refs = await self.wait_for_file_indexing(path)
            ref_files = [r.get("file") for r in (refs or {}).get("refs") or []]

            if ref_files:
                config.debug(f"{len(ref_files)} reference(s) to {path}")
                for ref_file in ref_files:
                    if ref_file and ref_file != path:
                        importing[ref_file] = None
                continue

            config.debug(f"{path} not indexed or unreferenced, scanning for undiscovered files")
            for candidate in await self._undiscovered_files(path):
                if candidate not in targets:
                    importing[candidate] = None

        if importing:
            config.debug(f"Opening {len(importing)} related file(s)")
            await asyncio.gather(*(self._open_quietly(f) for f in importing))

    async def _undiscovered_files(self, path: str) -> list[str]:
        project_info = await self.client.request("projectInfo", {"file": path, "needFileNameList": True})
        if not project_info or not project_info.get("configFileName"):
            return []

        project_root = os.path.dirname(project_info["configFileName"])
        known = set(project_info.get("fileNames") or [])
        files, timed_out = await asyncio.to_thread(scan_source_files, project_root, self.scan_timeout)
        if timed_out:
            self.last_scan_timed_out = True

        return [f for f in files if f not in known]

    async def _open_quietly(self, path: str):
        try:
            await self.client.open_file(path)
        except Exception as e:
            config.debug(f"Failed to open related file {path}: {e}")
