"""
Human-readable text output.

One line per diagnostic, in the format editors and CI annotators parse:

    src/Player.lua:12:5: warning [quote-style] Use double quotes (") for strings

With show_source, the offending line follows with a caret under the column.
"""

from typing import Dict, List, Optional

from luastyle.diagnostics import Diagnostic, LintReport, LintSummary, summarize


def format_diagnostic(d: Diagnostic) -> str:
    path = d.path or "<source>"
    return f"{path}:{d.line}:{d.column}: {d.severity.value} [{d.rule_id}] {d.message}"


def build_snippet(line_text: str, line: int, column: int) -> str:
    """Return the source line prefixed by its number, and a caret under `column`."""
    gutter = f"{line:5d} | "
    # keep tabs so the caret lines up with tab-indented code
    padding = "".join(ch if ch == "\t" else " " for ch in line_text[:max(column - 1, 0)])
    return f"{gutter}{line_text}\n{' ' * (len(gutter) - 2)}| {padding}^"


def format_summary(summary: LintSummary) -> str:
    files = f"{summary.files_checked} file{'s' if summary.files_checked != 1 else ''}"
    if summary.total == 0:
        return f"No problems found in {files}"
    problems = f"{summary.total} problem{'s' if summary.total != 1 else ''}"
    return (
        f"{problems} in {files} "
        f"({summary.errors} error(s), {summary.warnings} warning(s), {summary.infos} info)"
    )


def render_text(
    reports: List[LintReport],
    show_source: bool = False,
    summary: bool = True,
    sources: Optional[Dict[str, str]] = None,
) -> str:
    """
    Render reports as text.

    Args:
        reports: Lint reports, in output order
        show_source: Print the offending line under each diagnostic
        summary: Append the closing summary line
        sources: Source text by report path, used for snippets
    """
    sources = sources or {}
    out: List[str] = []
    for report in reports:
        lines = sources.get(report.path or "", "").splitlines()
        for d in report.diagnostics:
            out.append(format_diagnostic(d))
            if show_source and 0 < d.line <= len(lines):
                out.append(build_snippet(lines[d.line - 1], d.line, d.column))
    if summary:
        out.append(format_summary(summarize(reports)))
    return "\n".join(out) + "\n" if out else ""
