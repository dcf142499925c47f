"""refactor_module and cleanup_codebase."""

import os

import pytest

from tests.conftest import FakeClient, ReadyGuard
from tsrefactor.discovery import FileDiscovery
from tsrefactor.files import FileOperations
from tsrefactor.indentation import IndentationDetector
from tsrefactor.operations.cleanup import FixAllOperation, OrganizeImportsOperation, RemoveUnusedOperation
from tsrefactor.operations.moves import MoveFileOperation
from tsrefactor.operations.workflows import CleanupCodebaseOperation, RefactorModuleOperation

DOUBLE_QUOTED = 'import { oldName } from "./utils";\n'


def organize_only(target, new_text):
    """organizeImports answer that rewrites line 1 of `target` and leaves other files alone."""
    def respond(args):
        path = args["scope"]["args"]["file"]
        if path != target:
            return []
        return [{"fileName": path, "textChanges": [
            {"start": {"line": 1, "offset": 1}, "end": {"line": 2, "offset": 1}, "newText": new_text},
        ]}]
    return respond


def organized_files(client):
    return [args["scope"]["args"]["file"] for args in client.arguments("organizeImports")]


def make_refactor(client):
    file_ops = FileOperations()
    guard = ReadyGuard()
    mover = MoveFileOperation(client, file_ops, guard, FileDiscovery(client, poll_interval=0))
    organizer = OrganizeImportsOperation(client, file_ops, guard, IndentationDetector())
    return RefactorModuleOperation(mover, organizer, FixAllOperation(client, file_ops, guard))


def make_cleanup(client):
    file_ops = FileOperations()
    guard = ReadyGuard()
    return CleanupCodebaseOperation(
        client,
        guard,
        OrganizeImportsOperation(client, file_ops, guard, IndentationDetector()),
        RemoveUnusedOperation(client, file_ops, guard),
        file_ops,
    )


@pytest.fixture
def paths(project):
    return str(project / "src" / "utils.ts"), str(project / "src" / "main.ts")


@pytest.mark.asyncio
async def test_refactor_module_moves_then_cleans_touched_files(project, paths):
    utils, main = paths
    destination = str(project / "src" / "lib" / "utils.ts")
    client = FakeClient({
        "getEditsForFileRename": [{"fileName": main, "textChanges": [
            {"start": {"line": 1, "offset": 25}, "end": {"line": 1, "offset": 34}, "newText": "'./lib/utils'"},
        ]}],
        "organizeImports": organize_only(main, 'import { oldName } from "./lib/utils";\n'),
        "semanticDiagnosticsSync": [],
    })

    result = await make_refactor(client).execute(utils, destination)

    assert result.success, result.message
    assert result.message.startswith(f"Refactored module successfully:\n✓ Moved file to {destination}")
    assert "✓ Organized imports in main.ts" in result.message
    assert "Fixed errors" not in result.message
    assert not os.path.exists(utils)
    assert os.path.exists(destination)
    assert open(main).read() == 'import { oldName } from "./lib/utils";\nconsole.log(oldName);\n'
    assert organized_files(client) == [main, destination]
    assert [args["file"] for args in client.arguments("semanticDiagnosticsSync")] == [main, destination]
    assert [c.path for c in result.files_changed] == [main]


@pytest.mark.asyncio
async def test_refactor_module_preview_only_moves_on_paper(project, paths):
    utils, main = paths
    destination = str(project / "src" / "lib" / "utils.ts")
    before = open(main).read()
    client = FakeClient({"getEditsForFileRename": [{"fileName": main, "textChanges": [
        {"start": {"line": 1, "offset": 25}, "end": {"line": 1, "offset": 34}, "newText": "'./lib/utils'"},
    ]}]})

    result = await make_refactor(client).execute(utils, destination, preview=True)

    assert result.success
    assert result.message.startswith("Preview: Would refactor module (move + organize + fix)")
    assert result.preview["filesAffected"] == 2
    assert result.preview["estimatedTime"] == "< 2s"
    assert os.path.exists(utils)
    assert open(main).read() == before
    assert "organizeImports" not in client.commands()


@pytest.mark.asyncio
async def test_refactor_module_stops_when_move_fails(project):
    client = FakeClient()

    result = await make_refactor(client).execute(str(project / "missing.ts"), str(project / "x.ts"))

    assert not result.success
    assert "source file not found" in result.message
    assert "organizeImports" not in client.commands()


@pytest.fixture
def codebase(project):
    (project / "src" / "legacy.js").write_text("module.exports = 1;\n")
    (project / "types.d.ts").write_text("declare const x: number;\n")
    vendored = project / "node_modules" / "dep"
    vendored.mkdir(parents=True)
    (vendored / "index.ts").write_text("export const dep = 1;\n")
    return project


@pytest.mark.asyncio
async def test_cleanup_codebase_visits_every_typescript_file(codebase, paths):
    utils, main = paths
    client = FakeClient({
        "organizeImports": organize_only(main, DOUBLE_QUOTED),
        "semanticDiagnosticsSync": [],
        "suggestionDiagnosticsSync": [],
    })

    result = await make_cleanup(client).execute(str(codebase))

    assert result.success, result.message
    assert result.message.startswith("Cleanup completed successfully:\n✓ Removed unused code and organized imports")
    assert "✓ Changed 1 file(s)" in result.message
    assert "Processed 2 TypeScript file(s)" in result.message
    assert organized_files(client) == [main, utils]
    assert [args["file"] for args in client.arguments("suggestionDiagnosticsSync")] == [main, utils]
    assert open(main).read() == DOUBLE_QUOTED + "console.log(oldName);\n"
    assert [c.path for c in result.files_changed] == [main]


@pytest.mark.asyncio
async def test_cleanup_codebase_preview_writes_nothing(codebase, paths):
    _, main = paths
    before = open(main).read()
    client = FakeClient({"organizeImports": organize_only(main, DOUBLE_QUOTED), "semanticDiagnosticsSync": []})

    result = await make_cleanup(client).execute(str(codebase), remove_unused=False, preview=True)

    assert result.success
    assert result.message.startswith("Preview: Would clean up 1 of 2 TypeScript file(s)")
    assert result.preview["filesAffected"] == 1
    assert open(main).read() == before
    assert "suggestionDiagnosticsSync" not in client.commands()


@pytest.mark.asyncio
async def test_cleanup_codebase_reports_per_file_failures(codebase, paths):
    utils, main = paths

    def organize(args):
        if args["scope"]["args"]["file"] == utils:
            raise RuntimeError("No Project.")
        return []

    client = FakeClient({"organizeImports": organize})

    result = await make_cleanup(client).execute(str(codebase), remove_unused=False)

    assert result.success
    assert "Failed:\n  • utils.ts: Organize imports failed: No Project." in result.message


@pytest.mark.asyncio
async def test_cleanup_codebase_without_typescript_files(tmp_path):
    (tmp_path / "index.js").write_text("module.exports = 1;\n")
    client = FakeClient()

    result = await make_cleanup(client).execute(str(tmp_path))

    assert not result.success
    assert result.message.startswith(f"No TypeScript files found in {tmp_path}")
    assert client.requests == []


@pytest.mark.asyncio
async def test_cleanup_codebase_rejects_missing_directory(tmp_path):
    result = await make_cleanup(FakeClient()).execute(str(tmp_path / "nope"))

    assert not result.success
    assert "not a directory" in result.message
