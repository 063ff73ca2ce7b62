"""
Linter: runs the rule engine over sources, files and directory trees.

Pipeline per file:
    1. Tokenize (a LexError becomes a `syntax-error` diagnostic)
    2. Parse (a ParseError becomes a `syntax-error` diagnostic)
    3. Run every enabled rule whose layer is available
    4. Drop diagnostics silenced by inline `luastyle:` comments
    5. Sort by position

IMPORTANT: Source-level problems never raise. Only configuration and IO
problems do (ConfigError, LintIOError).
"""

from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Union

from luastyle.config import ALWAYS_ENABLED, DEFAULT_CONFIG, LintConfig
from luastyle.diagnostics import Diagnostic, LintReport, summarize
from luastyle.errors import LexError, LintIOError, ParseError
from luastyle.lexer import tokenize
from luastyle.parser import parse_tokens
from luastyle.rules import ALL_RULES, RULES_BY_ID, SYNTAX_ERROR, LintContext
from luastyle.tokens import TokenKind

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")

_DIRECTIVE = re.compile(r"luastyle:\s*(ignore-file|ignore-next-line|ignore)\b(.*)")
_RULE_LIST = re.compile(r"\s*([a-z][a-z0-9-]*(?:\s*,\s*[a-z][a-z0-9-]*)*)")
_LINE_DIRECTIVE = re.compile(r"--.*luastyle:")


# =============================================================================
# INLINE SUPPRESSIONS
# =============================================================================


@dataclass
class Suppressions:
    """
    Inline `-- luastyle: ...` directives of one file.

    A rule set of None means "every rule".
    """

    file_all: bool = False
    file_rules: Set[str] = field(default_factory=set)
    lines: Dict[int, Optional[Set[str]]] = field(default_factory=dict)

    def add_line(self, line: int, rules: Optional[Set[str]]) -> None:
        if rules is None or self.lines.get(line, set()) is None:
            self.lines[line] = None
        else:
            self.lines.setdefault(line, set()).update(rules)

    def is_suppressed(self, diagnostic: Diagnostic) -> bool:
        if diagnostic.rule_id in ALWAYS_ENABLED:
            return False
        if self.file_all or diagnostic.rule_id in self.file_rules:
            return True
        if diagnostic.line not in self.lines:
            return False
        rules = self.lines[diagnostic.line]
        return rules is None or diagnostic.rule_id in rules


def _parse_rule_list(text: str) -> Optional[Set[str]]:
    """
    Read the rule ids at the start of a directive's text.

    Text that names no known rule (`-- luastyle: ignore legacy code`) is a
    reason, and the directive covers every rule.
    """
    match = _RULE_LIST.match(text)
    if not match:
        return None
    rules = {part.strip() for part in match.group(1).split(",")}
    known = {r for r in rules if r in RULES_BY_ID}
    if not known:
        return None
    if known != rules:
        logger.warning("Unknown rule(s) in luastyle directive: %s", ", ".join(sorted(rules - known)))
    return known


def collect_suppressions(context: LintContext) -> Suppressions:
    """Read suppression directives from comments (or raw lines if lexing failed)."""
    suppressions = Suppressions()
    if context.tokens is not None:
        comments = [(tok.line, tok.value) for tok in context.tokens if tok.kind == TokenKind.COMMENT]
    else:
        comments = [(number, line) for number, line in enumerate(context.lines, start=1)
                    if _LINE_DIRECTIVE.search(line)]

    for line, text in comments:
        match = _DIRECTIVE.search(text)
        if not match:
            continue
        kind, rest = match.group(1), match.group(2)
        rules = _parse_rule_list(rest)
        if kind == "ignore-file":
            if rules is None:
                suppressions.file_all = True
            else:
                suppressions.file_rules.update(rules)
        elif kind == "ignore-next-line":
            suppressions.add_line(line + 1, rules)
        else:
            suppressions.add_line(line, rules)
    return suppressions


# =============================================================================
# LINTING
# =============================================================================


def lint_source(
    source: str,
    config: Optional[LintConfig] = None,
    path: Optional[str] = None,
    fragment: bool = False,
) -> LintReport:
    """
    Lint a string of Lua source.

    Args:
        source: Source text (a leading byte order mark is ignored)
        config: Effective config (defaults if None)
        path: Path recorded on the diagnostics
        fragment: True for snippets embedded in another document

    Returns:
        LintReport with diagnostics sorted by position
    """
    config = config or DEFAULT_CONFIG
    if source.startswith("\ufeff"):
        source = source[1:]

    report = LintReport(path=path)
    tokens = None
    chunk = None
    syntax_problem = None
    try:
        tokens = tokenize(source)
        chunk = parse_tokens(tokens)
    except (LexError, ParseError) as e:
        syntax_problem = e
        logger.debug("%s: %s", path or "<source>", e)

    context = LintContext(source, config, tokens=tokens, chunk=chunk, path=path, fragment=fragment)
    report.parsed = chunk is not None
    report.lines_checked = len(context.lines)

    if syntax_problem is not None:
        report.add(SYNTAX_ERROR.diagnostic(context, syntax_problem.line, syntax_problem.column,
                                           syntax_problem.message))

    for rule in ALL_RULES:
        if not config.is_enabled(rule.rule_id) or not rule.can_run(context):
            continue
        report.extend(rule.check(context))

    suppressions = collect_suppressions(context)
    report.discard(suppressions.is_suppressed)
    report.sort()
    return report


def read_source(path: Path) -> str:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise LintIOError(f"Cannot read {path}: {e.strerror or e}")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise LintIOError(f"{path} is not valid UTF-8: {e}")


def lint_file(path: Union[str, Path], config: Optional[LintConfig] = None) -> LintReport:
    """
    Lint one file. Markdown files are linted through their fenced Lua blocks.

    Raises:
        LintIOError: If the file cannot be read or decoded
    """
    path = Path(path)
    config = config or DEFAULT_CONFIG
    logger.debug("Linting %s", path)
    source = read_source(path)
    if path.suffix.lower() in MARKDOWN_SUFFIXES:
        from luastyle.markdown import lint_markdown
        return lint_markdown(source, config, str(path))
    return lint_source(source, config, str(path))


def _is_excluded(path: Path, root: Path, patterns: Sequence[str]) -> bool:
    if not patterns:
        return False
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    for pattern in patterns:
        if fnmatch.fnmatch(relative.as_posix(), pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in relative.parts):
            return True
    return False


def collect_files(paths: Iterable[Union[str, Path]], config: Optional[LintConfig] = None) -> List[Path]:
    """
    Expand paths into the list of files to lint.

    Directories are searched recursively for the configured extensions (plus
    Markdown when enabled). Files named explicitly are always included.

    Raises:
        LintIOError: If a path does not exist
    """
    config = config or DEFAULT_CONFIG
    suffixes = {ext.lower() for ext in config.extensions}
    if config.markdown:
        suffixes.update(MARKDOWN_SUFFIXES)

    files: List[Path] = []
    seen: Set[Path] = set()
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = sorted(
                p for p in path.rglob("*")
                if p.is_file() and p.suffix.lower() in suffixes
                and not _is_excluded(p, path, config.exclude)
            )
            logger.debug("Found %d file(s) under %s", len(found), path)
        elif path.is_file():
            found = [path]
        else:
            raise LintIOError(f"No such file or directory: {path}")
        for item in found:
            if item not in seen:
                seen.add(item)
                files.append(item)
    return files


def lint_paths(paths: Iterable[Union[str, Path]], config: Optional[LintConfig] = None) -> List[LintReport]:
    """Lint every file under `paths`, in a stable order."""
    config = config or DEFAULT_CONFIG
    return [lint_file(path, config) for path in collect_files(paths, config)]


__all__ = [
    "lint_source",
    "lint_file",
    "lint_paths",
    "collect_files",
    "collect_suppressions",
    "Suppressions",
    "summarize",
]
