#!/usr/bin/env python3
"""TS Refactor - readiness guard run before every semantic request."""

import asyncio

from . import config
from .protocol import RefactorResult
from .tsserver import TSServerClient


class TSServerGuard:
    def __init__(self, client: TSServerClient, workspace: str, poll_interval: float = config.POLL_INTERVAL):
        self.client = client
        self.workspace = workspace
        self.poll_interval = poll_interval

    async def ensure_ready(self, timeout: float = config.READY_TIMEOUT) -> RefactorResult | None:
        """Start tsserver if needed and wait (bounded) for the project to load.

        Returns None when the caller may proceed, otherwise a failure result
        to hand back to the user unchanged.
        """
        if not self.client.is_running():
            await self.client.ensure_started(self.workspace)

        if self.client.is_project_loaded():
            return None

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while loop.time() < deadline:
            await asyncio.sleep(min(self.poll_interval, max(deadline - loop.time(), 0)))
            if self.client.is_project_loaded():
                config.debug(f"Project loaded after {timeout - (deadline - loop.time()):.2f}s")
                return None

        return RefactorResult(
            success=False,
            message=(
                f"⏳ TypeScript is still indexing the project (waited {timeout:g}s)\n"
                "\n"
                "💡 Try:\n"
                "  1. Wait a few more seconds and try again\n"
                "  2. For large projects, indexing can take 10-30 seconds\n"
                "  3. Check that tsconfig.json is properly configured"
            ),
        )
