#!/usr/bin/env python3
"""
TS Refactor - Indentation handling

tsserver generates declarations with a fixed 4-space indent. These helpers
detect the host file's indent unit and nesting depth and re-indent generated
fragments to match.
"""

from collections import Counter

from .tsserver import TSServerClient

TSSERVER_INDENT = "    "
DEFAULT_INDENT = "  "


def leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]


class IndentationDetector:
    def detect_indent_unit(self, lines: list[str]) -> str:
        """Most common indent increase between consecutive non-blank lines.

        Ties go to the increase seen first. Returns "" when nothing is nested.
        """
        increases: Counter[str] = Counter()
        previous = None

        for line in lines:
            if not line.strip():
                continue
            indent = leading_whitespace(line)
            if previous is not None and len(indent) > len(previous) and indent.startswith(previous):
                increases[indent[len(previous):]] += 1
            previous = indent

        if not increases:
            return ""
        return max(increases, key=increases.__getitem__)

    def detect_indent_unit_or_default(self, lines: list[str]) -> str:
        return self.detect_indent_unit(lines) or DEFAULT_INDENT

    def detect_nesting_level(self, line: str, indent_unit: str) -> int:
        indent = leading_whitespace(line)
        if not indent_unit:
            return 0
        if indent_unit == "\t":
            return indent.count("\t")
        return len(indent) // len(indent_unit)

    def get_indent_at_nesting_level(self, indent_unit: str, level: int) -> str:
        return indent_unit * level


class IndentationFixer:
    def __init__(self, detector: IndentationDetector | None = None):
        self.detector = detector or IndentationDetector()

    def fix_function_indentation(self, generated: str, original_lines: list[str]) -> str:
        """Swap tsserver's 4-space unit for the host file's unit, keeping each line's level.

        Extracted functions land at module scope, so level 0 stays level 0.
        """
        if "function " not in generated:
            return generated

        unit = self.detector.detect_indent_unit_or_default(original_lines)
        fixed = []
        for line in generated.split("\n"):
            if not line.strip():
                fixed.append(line)
                continue
            level = self.detector.detect_nesting_level(line, TSSERVER_INDENT)
            fixed.append(self.detector.get_indent_at_nesting_level(unit, level) + line.lstrip())
        return "\n".join(fixed)

    def fix_constant_indentation(self, generated: str, original_lines: list[str], target_line_index: int) -> str:
        """Indent the generated `const` line like the line it was extracted from."""
        if "const " not in generated:
            return generated

        text_lines = generated.split("\n")
        const_index = next(i for i, l in enumerate(text_lines) if "const " in l)

        unit = self.detector.detect_indent_unit_or_default(original_lines)
        target_line = original_lines[target_line_index] if 0 <= target_line_index < len(original_lines) else ""
        level = self.detector.detect_nesting_level(target_line, unit)

        text_lines[const_index] = (
            self.detector.get_indent_at_nesting_level(unit, level) + text_lines[const_index].lstrip()
        )
        return "\n".join(text_lines)

    def fix_variable_indentation(self, generated: str, original_lines: list[str], target_line_index: int) -> str:
        return self.fix_constant_indentation(generated, original_lines, target_line_index)


async def configure_for_file(
    client: TSServerClient,
    path: str,
    lines: list[str],
    detector: IndentationDetector | None = None,
):
    """Tell tsserver to format edits for `path` with the file's own indentation."""
    unit = (detector or IndentationDetector()).detect_indent_unit_or_default(lines)
    indent_size = 4 if unit == "\t" else len(unit)

    await client.request("configure", {
        "file": path,
        "formatOptions": {
            "indentSize": indent_size,
            "tabSize": indent_size,
            "convertTabsToSpaces": unit != "\t",
        },
    })
