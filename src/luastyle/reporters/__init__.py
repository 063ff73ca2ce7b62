"""Reporters for lint results (text, JSON, YAML)."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from luastyle.diagnostics import LintReport
from luastyle.errors import LintIOError
from luastyle.reporters.text import build_snippet, format_diagnostic, format_summary, render_text
from luastyle.serialization import reports_to_json, reports_to_yaml


class ReportFormat(Enum):
    """Output formats."""
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


def render(
    reports: List[LintReport],
    fmt: ReportFormat = ReportFormat.TEXT,
    show_source: bool = False,
    summary: bool = True,
    sources: Optional[Dict[str, str]] = None,
) -> str:
    """Render reports in the requested format. `show_source` and `summary` apply to text only."""
    if fmt == ReportFormat.JSON:
        return reports_to_json(reports) + "\n"
    if fmt == ReportFormat.YAML:
        return reports_to_yaml(reports)
    return render_text(reports, show_source=show_source, summary=summary, sources=sources)


def save_report(
    reports: List[LintReport],
    filename: Union[str, Path],
    fmt: ReportFormat = ReportFormat.TEXT,
    show_source: bool = False,
    sources: Optional[Dict[str, str]] = None,
) -> None:
    """
    Write rendered reports to a file.

    Raises:
        LintIOError: If the file cannot be written
    """
    text = render(reports, fmt, show_source=show_source, sources=sources)
    try:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise LintIOError(f"Cannot write report to {filename}: {e.strerror or e}")


__all__ = [
    "ReportFormat",
    "render",
    "render_text",
    "save_report",
    "build_snippet",
    "format_diagnostic",
    "format_summary",
]
