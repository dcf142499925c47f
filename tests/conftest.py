"""Shared fixtures: a throwaway TS project and a scripted tsserver stand-in."""

import json

import pytest


def frame(message) -> bytes:
    """Encode a message the way tsserver writes it to stdout."""
    body = (json.dumps(message) + "\n").encode("utf-8")
    return b"Content-Length: %d\r\n\r\n" % len(body) + body


class FakeClient:
    """Records requests and answers them from `responses`.

    A response may be a value, a callable taking the request arguments, or an
    exception instance to raise. Unknown commands answer None.
    """

    def __init__(self, responses: dict | None = None, running: bool = True, loaded: bool = True):
        self.responses = {"fileReferences": {"refs": []}}
        self.responses.update(responses or {})
        self.requests: list[tuple[str, dict | None]] = []
        self.opened: list[str] = []
        self.running = running
        self.loaded = loaded
        self.starts: list[str] = []
        self.stops = 0
        self.workspace = None
        self.process = None
        self.pending_requests = {}

    def is_running(self) -> bool:
        return self.running

    def is_project_loaded(self) -> bool:
        return self.loaded

    async def start(self, workspace: str):
        self.starts.append(workspace)
        self.workspace = workspace
        self.running = True

    async def ensure_started(self, workspace: str):
        if not self.running:
            await self.start(workspace)

    async def stop(self):
        self.stops += 1
        self.running = False
        self.loaded = True

    async def request(self, command: str, arguments: dict | None = None, timeout: float | None = None):
        self.requests.append((command, arguments))
        response = self.responses.get(command)
        if callable(response):
            response = response(arguments)
        if isinstance(response, Exception):
            raise response
        return response

    async def open_file(self, path: str):
        self.opened.append(path)

    def commands(self) -> list[str]:
        return [command for command, _ in self.requests]

    def arguments(self, command: str) -> list[dict | None]:
        return [args for c, args in self.requests if c == command]


class ReadyGuard:
    """Guard stand-in that always lets the operation through (or never does)."""

    def __init__(self, not_ready=None):
        self.not_ready = not_ready
        self.calls = 0

    async def ensure_ready(self, timeout: float = 5.0):
        self.calls += 1
        return self.not_ready


@pytest.fixture
def project(tmp_path):
    """A tiny TS project: src/utils.ts exports oldName, src/main.ts uses it."""
    (tmp_path / "tsconfig.json").write_text('{"compilerOptions": {"strict": true}}\n')
    src = tmp_path / "src"
    src.mkdir()
    (src / "utils.ts").write_text("export const oldName = 1;\n")
    (src / "main.ts").write_text("import { oldName } from './utils';\nconsole.log(oldName);\n")
    return tmp_path


@pytest.fixture
def fake_client():
    return FakeClient()
