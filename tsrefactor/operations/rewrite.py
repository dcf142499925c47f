#!/usr/bin/env python3
"""
Cursor-position rewrites: inline variable, infer function return type.

Both ask tsserver which refactors apply at a single point, pick the one
matching the operation's keywords and apply its edits unchanged.
"""

from ..files import FileOperations
from ..guard import TSServerGuard
from ..protocol import RefactorResult, parse_file_edits, preview_info
from ..tsserver import TSServerClient
from .base import apply_file_edits, failure


class PointRefactorOperation:
    label = ""
    refactor_kind = ""
    keywords: tuple[str, ...] = ()
    done_message = ""
    next_actions: list[str] = []
    unavailable_hints: list[str] = []
    no_action_hints: list[str] = []
    failure_hints: list[str] = []

    def __init__(self, client: TSServerClient, file_ops: FileOperations, guard: TSServerGuard):
        self.client = client
        self.file_ops = file_ops
        self.guard = guard

    def _matches(self, text: str) -> bool:
        text = text.lower()
        return any(keyword in text for keyword in self.keywords)

    async def execute(self, file_path: str, line: int, column: int, preview: bool = False) -> RefactorResult:
        label = self.label
        try:
            file_path = self.file_ops.resolve_path(file_path)
            where = f"{file_path}:{line}:{column}"

            not_ready = await self.guard.ensure_ready()
            if not_ready:
                return not_ready

            await self.client.open_file(file_path)
            point = {
                "file": file_path,
                "startLine": line,
                "startOffset": column,
                "endLine": line,
                "endOffset": column,
            }

            refactors = await self.client.request("getApplicableRefactors", {
                **point,
                "triggerReason": "invoked",
                "kind": self.refactor_kind,
            }) or []
            if not refactors:
                return failure(f"❌ Cannot {label}", f"not available at {where}", self.unavailable_hints)

            refactor = next((r for r in refactors if self._matches(r.get("name", ""))), None)
            if refactor is None:
                available = ", ".join(r.get("name", "?") for r in refactors)
                return failure(f"❌ {label.capitalize()} not available at {where}", f"available refactorings: {available}", [
                    "Try a different location or use one of the available refactorings",
                ])

            actions = refactor.get("actions") or []
            action = next((a for a in actions if self._matches(a.get("description", ""))), None)
            action = action or (actions[0] if actions else None)
            if action is None:
                return failure(f"❌ No {label} action at {where}", "tsserver offered none", self.no_action_hints)

            edit_info = await self.client.request("getEditsForRefactor", {
                **point,
                "refactor": refactor["name"],
                "action": action["name"],
            }) or {}
            file_edits = parse_file_edits(edit_info.get("edits"))
            if not file_edits:
                return failure(f"❌ No edits generated for {label} at {where}", "empty edit set", [
                    "Check that the file is saved and syntactically valid",
                ])

            records = await apply_file_edits(self.file_ops, file_edits, preview)
            if preview:
                return RefactorResult(
                    success=True,
                    message=f"Preview: Would {label}",
                    files_changed=records,
                    preview=preview_info(len(records)),
                )
            return RefactorResult(
                success=True,
                message=self.done_message,
                files_changed=records,
                next_actions=list(self.next_actions),
            )
        except Exception as e:
            return failure(f"❌ {label.capitalize()} failed", e, self.failure_hints)


class InlineVariableOperation(PointRefactorOperation):
    """Replace every use of a variable with its initializer and drop the declaration."""

    label = "inline variable"
    refactor_kind = "refactor.inline"
    keywords = ("inline",)
    done_message = "✅ Inlined variable successfully"
    next_actions = ["remove_unused - Clean up any unused imports"]
    unavailable_hints = [
        "Place cursor on a variable name (in declaration or usage)",
        "Ensure the variable has a simple value that can be inlined",
        "Verify the variable is only used in the same scope",
    ]
    no_action_hints = [
        "The variable might have side effects that prevent inlining",
        "Ensure the variable's value is simple enough to inline",
    ]
    failure_hints = [
        "Check that the file is saved and syntactically valid",
        "Ensure TypeScript can parse the code",
        "Verify the variable can be safely inlined without side effects",
    ]


class InferReturnTypeOperation(PointRefactorOperation):
    """Write TypeScript's inferred return type into a function signature."""

    label = "infer return type"
    refactor_kind = "refactor.rewrite.function.returnType"
    keywords = ("infer", "return")
    done_message = "Inferred return type successfully"
    next_actions = ["organize_imports - Add any missing type imports"]
    unavailable_hints = [
        "Place cursor on a function name or signature",
        "Ensure the function doesn't already have a return type",
        "Verify TypeScript can infer the return type from the implementation",
    ]
    no_action_hints = [
        "The function might already have an explicit return type",
        "Ensure the function has a return statement",
    ]
    failure_hints = [
        "Check that the file is saved and syntactically valid",
        "Verify the function body is complete and type-checkable",
    ]
