"""
Lint the Lua examples embedded in Markdown documents.

Style guide pages show code in fenced blocks:

    ```lua
    local function greet(name)
        print("Hello, " .. name)
    end
    ```

Only blocks tagged `lua` or `luau` are linted. Counter-examples are skipped:
a block whose first non-blank line is a comment starting with "Bad", or whose
info string contains `nolint`.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from luastyle.config import DEFAULT_CONFIG, LintConfig
from luastyle.diagnostics import Diagnostic, LintReport
from luastyle.linter import lint_source


_FENCE_OPEN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})\s*(?P<info>[^`]*)$")
_BAD_EXAMPLE = re.compile(r"^\s*--+\s*bad\b", re.IGNORECASE)
LUA_LANGUAGES = {"lua", "luau"}


@dataclass
class CodeBlock:
    """
    One fenced code block.

    Properties:
        language: First word of the info string, lowercased ("" if none)
        info: Full info string
        code: Block contents, one "\\n"-terminated line per source line
        start_line: Markdown line number of the first code line (1-based)
    """

    language: str
    info: str
    code: str
    start_line: int

    @property
    def is_lua(self) -> bool:
        return self.language in LUA_LANGUAGES

    @property
    def is_counter_example(self) -> bool:
        if "nolint" in self.info.lower():
            return True
        for line in self.code.splitlines():
            if line.strip():
                return bool(_BAD_EXAMPLE.match(line))
        return False


def extract_code_blocks(text: str) -> List[CodeBlock]:
    """
    Return every fenced code block in a Markdown document.

    An unclosed fence runs to the end of the document, as CommonMark does.
    """
    blocks: List[CodeBlock] = []
    lines = text.splitlines()
    i = 0
    while i < len(lines):
        match = _FENCE_OPEN.match(lines[i])
        if not match:
            i += 1
            continue
        fence = match.group("fence")
        indent = len(match.group("indent"))
        info = match.group("info").strip()
        language = info.split()[0].lower() if info else ""
        closing = re.compile(r"^ {0,3}" + re.escape(fence[0]) + "{" + str(len(fence)) + r",}\s*$")

        body: List[str] = []
        j = i + 1
        while j < len(lines) and not closing.match(lines[j]):
            line = lines[j]
            # strip up to the fence's own indentation
            strip = min(indent, len(line) - len(line.lstrip(" ")))
            body.append(line[strip:])
            j += 1

        code = "".join(line + "\n" for line in body)
        blocks.append(CodeBlock(language=language, info=info, code=code, start_line=i + 2))
        i = j + 1
    return blocks


def _shift(diagnostic: Diagnostic, offset: int, path: Optional[str]) -> Diagnostic:
    return Diagnostic(
        rule_id=diagnostic.rule_id,
        message=diagnostic.message,
        line=diagnostic.line + offset,
        column=diagnostic.column,
        severity=diagnostic.severity,
        path=path,
        end_line=diagnostic.end_line + offset if diagnostic.end_line is not None else None,
        end_column=diagnostic.end_column,
    )


def lint_markdown(text: str, config: Optional[LintConfig] = None, path: Optional[str] = None) -> LintReport:
    """
    Lint the Lua code blocks of a Markdown document.

    Diagnostic lines are reported in Markdown-file coordinates.
    """
    config = config or DEFAULT_CONFIG
    report = LintReport(path=path, parsed=True)
    for block in extract_code_blocks(text):
        if not block.is_lua or block.is_counter_example:
            continue
        block_report = lint_source(block.code, config, path=path, fragment=True)
        report.lines_checked += block_report.lines_checked
        report.parsed = report.parsed and block_report.parsed
        report.extend(_shift(d, block.start_line - 1, path) for d in block_report.diagnostics)
    report.sort()
    return report
