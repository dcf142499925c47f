#!/usr/bin/env python3
"""TS Refactor - UTF-8 line IO with per-path locking."""

import asyncio
import os
import shutil
import weakref
from contextlib import asynccontextmanager
from pathlib import Path


class FileOperations:
    """Reads and writes files as `\\n`-separated lines.

    A carriage return before `\\n` stays part of the line's content, so CRLF
    files round-trip byte for byte.
    """

    def __init__(self):
        # Entries vanish once no holder or waiter references the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def resolve_path(self, path: str) -> str:
        return os.path.abspath(path)

    def read_lines(self, path: str) -> list[str]:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read().split("\n")

    def write_lines(self, path: str, lines: list[str]):
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write("\n".join(lines))

    def move(self, source: str, destination: str):
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        shutil.move(source, destination)

    @asynccontextmanager
    async def locked(self, path: str):
        """Serialise read/compute/write cycles on one path."""
        key = self.resolve_path(path)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        async with lock:
            yield
