#!/usr/bin/env python3
"""tsserver lifecycle operations."""

import sys

from ..protocol import RefactorResult
from ..tsserver import TSServerClient
from .base import failure


class RestartTsServerOperation:
    def __init__(self, client: TSServerClient, workspace: str):
        self.client = client
        self.workspace = workspace

    async def execute(self) -> RefactorResult:
        """Stop and start tsserver; in-flight requests are abandoned."""
        try:
            print("Restarting TypeScript server...", file=sys.stderr)
            await self.client.stop()
            await self.client.start(self.workspace)
            return RefactorResult(success=True, message="TypeScript server restarted successfully")
        except Exception as e:
            return failure("Failed to restart TypeScript server", e, [
                "Check that typescript is installed in the workspace (npm install typescript)",
                "Set TSREFACTOR_TSSERVER to the tsserver.js path if it lives elsewhere",
            ])


def server_status(client: TSServerClient) -> dict:
    process = client.process
    return {
        "running": client.is_running(),
        "projectLoaded": client.is_project_loaded(),
        "pid": process.pid if process else None,
        "workspace": client.workspace,
        "pendingRequests": len(client.pending_requests),
    }
