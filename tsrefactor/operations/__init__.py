#!/usr/bin/env python3
"""
TS Refactor - Operations

Thin refactorings built on the shared tsserver client, guard, discovery and
edit engine. `Operations` wires one set of them around a single client.
"""

from ..discovery import FileDiscovery
from ..files import FileOperations
from ..guard import TSServerGuard
from ..indentation import IndentationDetector, IndentationFixer
from ..tsserver import TSServerClient
from .cleanup import FixAllOperation, OrganizeImportsOperation, RemoveUnusedOperation
from .extract import CONSTANT, FUNCTION, VARIABLE, ExtractOperation
from .moves import BatchMoveFilesOperation, MoveFileOperation, RenameFileOperation
from .references import FindReferencesOperation
from .rename import RenameOperation
from .rewrite import InferReturnTypeOperation, InlineVariableOperation
from .server import RestartTsServerOperation, server_status
from .workflows import CleanupCodebaseOperation, RefactorModuleOperation


class Operations:
    def __init__(self, client: TSServerClient, workspace: str):
        self.client = client
        self.workspace = workspace
        self.file_ops = FileOperations()
        self.guard = TSServerGuard(client, workspace)
        self.discovery = FileDiscovery(client)
        detector = IndentationDetector()
        fixer = IndentationFixer(detector)

        self.rename = RenameOperation(client, self.file_ops, self.guard, self.discovery)
        self.find_references = FindReferencesOperation(client, self.file_ops, self.guard, self.discovery)
        self.organize_imports = OrganizeImportsOperation(client, self.file_ops, self.guard, detector)
        self.fix_all = FixAllOperation(client, self.file_ops, self.guard)
        self.remove_unused = RemoveUnusedOperation(client, self.file_ops, self.guard)
        self.extract_function = ExtractOperation(FUNCTION, client, self.file_ops, self.guard, fixer)
        self.extract_constant = ExtractOperation(CONSTANT, client, self.file_ops, self.guard, fixer)
        self.extract_variable = ExtractOperation(VARIABLE, client, self.file_ops, self.guard, fixer)
        self.inline_variable = InlineVariableOperation(client, self.file_ops, self.guard)
        self.infer_return_type = InferReturnTypeOperation(client, self.file_ops, self.guard)
        self.move_file = MoveFileOperation(client, self.file_ops, self.guard, self.discovery)
        self.rename_file = RenameFileOperation(self.move_file)
        self.batch_move_files = BatchMoveFilesOperation(self.move_file, self.guard, client)
        self.refactor_module = RefactorModuleOperation(self.move_file, self.organize_imports, self.fix_all)
        self.cleanup_codebase = CleanupCodebaseOperation(
            client, self.guard, self.organize_imports, self.remove_unused, self.file_ops
        )
        self.restart_tsserver = RestartTsServerOperation(client, workspace)

    def status(self) -> dict:
        return server_status(self.client)


__all__ = ["Operations"]
