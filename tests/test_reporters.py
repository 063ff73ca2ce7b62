"""
Tests for report rendering (text, JSON, YAML).
"""

import json

import pytest
import yaml

from luastyle.diagnostics import Diagnostic, LintReport, Severity, summarize
from luastyle.errors import LintIOError
from luastyle.reporters import (
    ReportFormat,
    build_snippet,
    format_diagnostic,
    format_summary,
    render,
    save_report,
)


SOURCE = "local x = 1\n\tlocal s = 'hi'\n"


def sample_report():
    report = LintReport(path="a.lua", lines_checked=2, parsed=True)
    report.add(Diagnostic("quote-style", "Use double quotes (\") for strings", 2, 12, path="a.lua"))
    return report


class TestTextFormat:
    """Test the one-line-per-diagnostic format."""

    def test_format_diagnostic(self):
        d = sample_report().diagnostics[0]
        assert format_diagnostic(d) == 'a.lua:2:12: warning [quote-style] Use double quotes (") for strings'

    def test_in_memory_source(self):
        d = Diagnostic("naming", "bad name", 1, 7, severity=Severity.ERROR)
        assert format_diagnostic(d) == "<source>:1:7: error [naming] bad name"

    def test_snippet_caret_follows_tabs(self):
        snippet = build_snippet("\tlocal s = 'hi'", 2, 12)
        first, second = snippet.split("\n")
        assert first == "    2 | \tlocal s = 'hi'"
        assert second == "      | \t" + " " * 10 + "^"

    def test_render_with_source(self):
        text = render([sample_report()], show_source=True, sources={"a.lua": SOURCE})
        lines = text.splitlines()
        assert lines[0].startswith("a.lua:2:12:")
        assert lines[1] == "    2 | \tlocal s = 'hi'"
        assert lines[2].endswith("^")
        assert lines[-1].startswith("1 problem in 1 file")

    def test_show_source_without_text(self):
        text = render([sample_report()], show_source=True)
        assert len(text.splitlines()) == 2

    def test_no_summary(self):
        assert render([sample_report()], summary=False).count("\n") == 1


class TestSummary:
    """Test the closing summary line."""

    def test_clean(self):
        clean = LintReport(path="a.lua")
        assert format_summary(summarize([clean])) == "No problems found in 1 file"
        assert render([clean, LintReport(path="b.lua")]) == "No problems found in 2 files\n"

    def test_counts(self):
        report = sample_report()
        report.add(Diagnostic("syntax-error", "oops", 3, 1, severity=Severity.ERROR, path="a.lua"))
        assert format_summary(summarize([report])) == (
            "2 problems in 1 file (1 error(s), 1 warning(s), 0 info)"
        )

    def test_no_files(self):
        assert render([]) == "No problems found in 0 files\n"


class TestStructuredFormats:
    """Test JSON and YAML output."""

    def test_json(self):
        data = json.loads(render([sample_report()], ReportFormat.JSON))
        assert data["reports"][0]["diagnostics"][0]["rule"] == "quote-style"
        assert data["summary"]["warnings"] == 1

    def test_yaml(self):
        data = yaml.safe_load(render([sample_report()], ReportFormat.YAML))
        assert data["reports"][0]["path"] == "a.lua"

    def test_format_values(self):
        assert [f.value for f in ReportFormat] == ["text", "json", "yaml"]


class TestSaveReport:
    """Test writing reports to files."""

    def test_save(self, tmp_path):
        target = tmp_path / "report.json"
        save_report([sample_report()], target, ReportFormat.JSON)
        assert json.loads(target.read_text())["summary"]["total"] == 1

    def test_unwritable(self, tmp_path):
        with pytest.raises(LintIOError):
            save_report([sample_report()], tmp_path / "missing" / "report.txt")
