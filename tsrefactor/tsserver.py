#!/usr/bin/env python3
"""
TS Refactor - TSServer Client

Owns one persistent tsserver subprocess. Requests are written to stdin as
newline-terminated JSON; responses and events arrive on stdout framed with a
Content-Length header and are demultiplexed by sequence number.
"""

import asyncio
import json
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from . import config

HEADER_RE = re.compile(rb"Content-Length: (\d+)\r?\n\r?\n")

# Events that move the project-loaded latch
LOADING_START_EVENTS = {"projectLoadingStart"}
LOADING_FINISH_EVENTS = {"projectLoadingFinish", "projectsUpdatedInBackground"}

CONFIGURE_PREFERENCES = {
    "includeCompletionsForModuleExports": True,
    "includeCompletionsWithInsertText": True,
    "allowIncompleteCompletions": True,
    "includeAutomaticOptionalChainCompletions": True,
}


class TSServerError(Exception):
    """A request failed or the server is in the wrong state for it."""


class RequestTimeoutError(TSServerError):
    pass


class MessageReader:
    """Incremental decoder for Content-Length framed JSON messages.

    Bytes may arrive split anywhere (mid-header, mid-body). A frame is only
    decoded once its header and full body are buffered; a body that is not a
    JSON object is reported and dropped, and decoding resumes at the next frame.
    """

    def __init__(self):
        self._buffer = b""

    def feed(self, data: bytes) -> list[dict]:
        self._buffer += data
        messages = []

        while True:
            match = HEADER_RE.search(self._buffer)
            if not match:
                break

            body_start = match.end()
            body_end = body_start + int(match.group(1))
            if len(self._buffer) < body_end:
                break  # wait for the rest of the body

            body = self._buffer[body_start:body_end]
            self._buffer = self._buffer[body_end:]

            try:
                message = json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                print(f"Failed to parse TSServer message: {e} body={body[:200]!r}", file=sys.stderr)
                continue
            if not isinstance(message, dict):
                print(f"Failed to parse TSServer message: not an object body={body[:200]!r}", file=sys.stderr)
                continue
            messages.append(message)

        return messages

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)


def _failure_message(message: dict) -> str:
    body = message.get("body")
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    if message.get("message"):
        return message["message"]
    if body:
        return str(body)
    return "Request failed"


class TSServerClient:
    def __init__(
        self,
        command_factory: Callable[[str], list[str]] = config.tsserver_command,
        request_timeout: float = config.REQUEST_TIMEOUT,
    ):
        self.command_factory = command_factory
        self.request_timeout = request_timeout
        self.workspace: str | None = None
        self.process: asyncio.subprocess.Process | None = None
        self.seq = 0
        self.pending_requests: dict[int, asyncio.Future] = {}
        self._reader = MessageReader()
        self._tasks: list[asyncio.Task] = []
        self._start_lock = asyncio.Lock()
        self._running = False
        self._project_loaded = True

    def is_running(self) -> bool:
        return self._running

    def is_project_loaded(self) -> bool:
        return self._project_loaded

    async def start(self, workspace: str):
        """Spawn tsserver rooted at `workspace` and send the initial configure request.

        A call that overlaps another start waits for it, then raises TSServerError
        because the server is running.
        """
        async with self._start_lock:
            if self._running:
                raise TSServerError("TypeScript server is already running")
            await self._spawn(workspace)

    async def ensure_started(self, workspace: str):
        """Start tsserver unless it is running; concurrent callers share one spawn."""
        async with self._start_lock:
            if not self._running:
                await self._spawn(workspace)

    async def _spawn(self, workspace: str):
        self.workspace = workspace
        self._reader = MessageReader()
        self._project_loaded = True  # tsserver answers while it indexes

        self.process = await asyncio.create_subprocess_exec(
            *self.command_factory(workspace),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=workspace,
        )
        self._running = True
        process = self.process
        self._tasks = [
            asyncio.create_task(self._read_loop(process)),
            asyncio.create_task(self._stderr_loop(process)),
            asyncio.create_task(self._watch_exit(process)),
        ]
        print(f"TSServer started (PID {process.pid}) in {workspace}", file=sys.stderr)

        try:
            await self.request("configure", {"preferences": CONFIGURE_PREFERENCES})
        except TSServerError:
            await self.stop()
            raise

    async def stop(self):
        """Terminate tsserver. Pending requests are left to time out."""
        if not self._running or self.process is None:
            return

        process = self.process
        self.process = None
        self._running = False
        self._project_loaded = True

        for task in self._tasks:
            task.cancel()
        self._tasks = []

        if process.returncode is None:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=5.0)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
        print("TSServer stopped", file=sys.stderr)

    async def _read_loop(self, process: asyncio.subprocess.Process):
        """Read stdout and dispatch every complete frame."""
        while True:
            try:
                chunk = await process.stdout.read(65536)
                if not chunk:
                    return
                self.feed(chunk)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                print(f"TSServer read error: {e}", file=sys.stderr)

    async def _stderr_loop(self, process: asyncio.subprocess.Process):
        while True:
            line = await process.stderr.readline()
            if not line:
                return
            config.debug(f"tsserver stderr: {line.decode(errors='replace').rstrip()}")

    async def _watch_exit(self, process: asyncio.subprocess.Process):
        code = await process.wait()
        print(f"TSServer process exited (code {code})", file=sys.stderr)
        if self.process is process:
            self._running = False

    def feed(self, data: bytes):
        """Push raw stdout bytes through the framer and dispatch the results."""
        for message in self._reader.feed(data):
            self.handle_message(message)

    def handle_message(self, message: dict):
        kind = message.get("type")

        if kind == "event":
            event = message.get("event")
            config.debug(f"tsserver event: {event}")
            if event in LOADING_START_EVENTS:
                self._project_loaded = False
            elif event in LOADING_FINISH_EVENTS:
                self._project_loaded = True

        elif kind == "response":
            future = self.pending_requests.pop(message.get("request_seq"), None)
            if future is None or future.done():
                return  # timed out already, or never ours
            if message.get("success"):
                future.set_result(message.get("body"))
            else:
                future.set_exception(TSServerError(_failure_message(message)))

    async def _send(self, message: dict):
        stdin = self.process.stdin
        stdin.write((json.dumps(message) + "\n").encode("utf-8"))
        try:
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            # The exit watcher flips `running`; the request itself will time out.
            print(f"TSServer write failed for {message.get('command')}: {e}", file=sys.stderr)

    async def request(self, command: str, arguments: dict | None = None, timeout: float | None = None) -> Any:
        """Send a request and wait for its response body.

        Raises RequestTimeoutError when no response arrives in time and
        TSServerError when tsserver reports failure.
        """
        if self.process is None or self.process.stdin is None:
            raise TSServerError(f"TypeScript server is not running (cannot send {command})")

        self.seq += 1
        seq = self.seq
        future = asyncio.get_running_loop().create_future()
        self.pending_requests[seq] = future

        message: dict[str, Any] = {"seq": seq, "type": "request", "command": command}
        if arguments is not None:
            message["arguments"] = arguments

        try:
            await self._send(message)
            return await asyncio.wait_for(future, timeout=timeout or self.request_timeout)
        except asyncio.TimeoutError:
            raise RequestTimeoutError(f"Request {command} timed out") from None
        finally:
            self.pending_requests.pop(seq, None)

    async def open_file(self, path: str):
        """Send a file's full content to tsserver (required before most requests)."""
        content = Path(path).read_text(encoding="utf-8")
        await self.request("open", {"file": path, "fileContent": content})
        self._project_loaded = True
