"""Request/response correlation, events and lifecycle of TSServerClient."""

import asyncio
import json
import sys

import pytest

from tests.conftest import frame
from tsrefactor.tsserver import RequestTimeoutError, TSServerClient, TSServerError


class FakeStdin:
    def __init__(self):
        self.messages = []

    def write(self, data: bytes):
        assert data.endswith(b"\n")
        self.messages.append(json.loads(data.decode("utf-8")))

    async def drain(self):
        pass


class FakeProcess:
    pid = 4242
    returncode = None

    def __init__(self):
        self.stdin = FakeStdin()


async def settle():
    for _ in range(3):
        await asyncio.sleep(0)


def respond(client: TSServerClient, seq: int, success: bool = True, **fields):
    client.feed(frame({"seq": 0, "type": "response", "request_seq": seq, "success": success, **fields}))


@pytest.fixture
def client():
    client = TSServerClient(request_timeout=1.0)
    client.process = FakeProcess()
    return client


@pytest.mark.asyncio
async def test_request_shape(client):
    task = asyncio.create_task(client.request("projectInfo", {"file": "/a.ts"}))
    await settle()
    assert client.process.stdin.messages == [
        {"seq": 1, "type": "request", "command": "projectInfo", "arguments": {"file": "/a.ts"}}
    ]
    respond(client, 1, body={"configFileName": "/tsconfig.json"})
    assert await task == {"configFileName": "/tsconfig.json"}


@pytest.mark.asyncio
async def test_arguments_omitted_when_none(client):
    task = asyncio.create_task(client.request("reloadProjects"))
    await settle()
    assert "arguments" not in client.process.stdin.messages[0]
    respond(client, 1)
    assert await task is None


@pytest.mark.asyncio
async def test_out_of_order_responses_reach_their_callers(client):
    first = asyncio.create_task(client.request("first"))
    second = asyncio.create_task(client.request("second"))
    await settle()
    assert [m["seq"] for m in client.process.stdin.messages] == [1, 2]

    respond(client, 2, body="two")
    respond(client, 1, body="one")
    assert await first == "one"
    assert await second == "two"
    assert client.pending_requests == {}


@pytest.mark.asyncio
async def test_failed_response_raises_service_message(client):
    task = asyncio.create_task(client.request("rename"))
    await settle()
    respond(client, 1, success=False, message="No Project.")
    with pytest.raises(TSServerError, match="No Project."):
        await task


@pytest.mark.asyncio
async def test_failed_response_without_message(client):
    task = asyncio.create_task(client.request("rename"))
    await settle()
    respond(client, 1, success=False)
    with pytest.raises(TSServerError, match="Request failed"):
        await task


@pytest.mark.asyncio
async def test_timeout_names_command_and_ignores_late_response(client):
    with pytest.raises(RequestTimeoutError, match="Request slowCommand timed out"):
        await client.request("slowCommand", timeout=0.05)
    assert client.pending_requests == {}
    respond(client, 1, body="too late")  # must not raise


@pytest.mark.asyncio
async def test_unknown_response_is_ignored(client):
    respond(client, 99, body="nobody asked")
    assert client.pending_requests == {}


@pytest.mark.asyncio
async def test_request_without_process():
    with pytest.raises(TSServerError, match="not running"):
        await TSServerClient().request("configure")


def test_loading_events_move_the_latch(client):
    assert client.is_project_loaded()
    client.feed(frame({"type": "event", "event": "projectLoadingStart"}))
    assert not client.is_project_loaded()
    client.feed(frame({"type": "event", "event": "telemetry"}))
    assert not client.is_project_loaded()
    client.feed(frame({"type": "event", "event": "projectLoadingFinish"}))
    assert client.is_project_loaded()

    client.feed(frame({"type": "event", "event": "projectLoadingStart"}))
    client.feed(frame({"type": "event", "event": "projectsUpdatedInBackground"}))
    assert client.is_project_loaded()


@pytest.mark.asyncio
async def test_open_file_sends_content_and_marks_loaded(client, tmp_path):
    path = tmp_path / "a.ts"
    path.write_text("export const a = 1;\n")
    client.feed(frame({"type": "event", "event": "projectLoadingStart"}))

    task = asyncio.create_task(client.open_file(str(path)))
    await settle()
    assert client.process.stdin.messages[0]["command"] == "open"
    assert client.process.stdin.messages[0]["arguments"] == {
        "file": str(path),
        "fileContent": "export const a = 1;\n",
    }
    respond(client, 1)
    await task
    assert client.is_project_loaded()


# Minimal stand-in for tsserver: echoes each request's arguments back.
ECHO_SERVER = r"""
import json, sys
while True:
    line = sys.stdin.readline()
    if not line:
        break
    msg = json.loads(line)
    body = json.dumps({"seq": 0, "type": "response", "request_seq": msg["seq"],
                       "command": msg["command"], "success": True,
                       "body": {"echo": msg.get("arguments")}}) + "\n"
    data = body.encode("utf-8")
    sys.stdout.buffer.write(b"Content-Length: %d\r\n\r\n" % len(data) + data)
    sys.stdout.buffer.flush()
"""


@pytest.mark.asyncio
async def test_lifecycle_against_subprocess(tmp_path):
    client = TSServerClient(command_factory=lambda ws: [sys.executable, "-c", ECHO_SERVER], request_timeout=10.0)
    await client.start(str(tmp_path))
    try:
        assert client.is_running()
        assert client.workspace == str(tmp_path)
        assert await client.request("projectInfo", {"file": "x.ts"}) == {"echo": {"file": "x.ts"}}

        with pytest.raises(TSServerError, match="already running"):
            await client.start(str(tmp_path))
    finally:
        await client.stop()

    assert not client.is_running()
    assert client.is_project_loaded()
    await client.stop()  # idempotent


def counting_echo_factory(spawned: list):
    def factory(workspace):
        spawned.append(workspace)
        return [sys.executable, "-c", ECHO_SERVER]
    return factory


@pytest.mark.asyncio
async def test_overlapping_starts_spawn_one_process(tmp_path):
    spawned = []
    client = TSServerClient(command_factory=counting_echo_factory(spawned), request_timeout=10.0)
    try:
        results = await asyncio.gather(
            client.start(str(tmp_path)),
            client.start(str(tmp_path)),
            return_exceptions=True,
        )
        assert spawned == [str(tmp_path)]
        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], TSServerError)
        assert "already running" in str(errors[0])
        assert client.is_running()
    finally:
        await client.stop()


@pytest.mark.asyncio
async def test_concurrent_ensure_started_share_one_spawn(tmp_path):
    spawned = []
    client = TSServerClient(command_factory=counting_echo_factory(spawned), request_timeout=10.0)
    try:
        await asyncio.gather(*(client.ensure_started(str(tmp_path)) for _ in range(3)))
        assert spawned == [str(tmp_path)]
        assert await client.request("projectInfo", {"file": "x.ts"}) == {"echo": {"file": "x.ts"}}
    finally:
        await client.stop()


@pytest.mark.asyncio
async def test_non_object_frame_does_not_drop_the_rest_of_the_chunk(client, capsys):
    task = asyncio.create_task(client.request("projectInfo"))
    await settle()

    client.feed(
        frame(None)
        + frame([])
        + frame({"seq": 0, "type": "response", "request_seq": 1, "success": True, "body": "ok"})
    )

    assert await task == "ok"
    assert client.pending_requests == {}
    assert "Failed to parse TSServer message" in capsys.readouterr().err
