"""
Tests for diagnostics, reports and summaries.
"""

import time

import pytest

from luastyle.diagnostics import Diagnostic, LintReport, Severity, summarize


class TestSeverity:
    """Test severity parsing and ordering."""

    def test_parse(self):
        assert Severity.parse(" Error ") == Severity.ERROR
        assert Severity.parse("info") == Severity.INFO

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="expected one of: error, warning, info"):
            Severity.parse("fatal")

    def test_rank(self):
        assert sorted(Severity, key=lambda s: s.rank) == [Severity.ERROR, Severity.WARNING, Severity.INFO]

    def test_ordering(self):
        assert Severity.ERROR < Severity.WARNING < Severity.INFO
        assert Severity.INFO >= Severity.WARNING
        assert sorted([Severity.INFO, Severity.ERROR, Severity.WARNING]) == [
            Severity.ERROR, Severity.WARNING, Severity.INFO,
        ]
        assert min(Severity) == Severity.ERROR


class TestLintReport:
    """Test per-file reports."""

    def test_duplicates_ignored(self):
        report = LintReport(path="a.lua")
        d = Diagnostic("naming", "bad", 1, 7, path="a.lua")
        report.extend([d, d, Diagnostic("naming", "bad", 1, 7, path="a.lua")])
        assert report.diagnostics == [d]

    def test_many_diagnostics(self):
        report = LintReport(path="a.lua")
        diagnostics = [Diagnostic("operator-spacing", "x", line, 1) for line in range(1, 20001)]
        start = time.perf_counter()
        report.extend(diagnostics)
        report.extend(diagnostics)
        assert time.perf_counter() - start < 5
        assert len(report.diagnostics) == 20000

    def test_discard(self):
        report = LintReport(path="a.lua")
        kept = Diagnostic("naming", "kept", 1, 1)
        dropped = Diagnostic("naming", "dropped", 2, 1)
        report.extend([kept, dropped])
        report.discard(lambda d: d.line == 2)
        assert report.diagnostics == [kept]
        report.add(dropped)
        report.add(kept)
        assert report.diagnostics == [kept, dropped]

    def test_seeded_diagnostics_are_deduplicated(self):
        d = Diagnostic("naming", "x", 1, 1)
        report = LintReport(path="a.lua", diagnostics=[d])
        report.add(d)
        assert report.diagnostics == [d]
        assert report == LintReport(path="a.lua", diagnostics=[d])

    def test_sort(self):
        report = LintReport(path="a.lua")
        report.add(Diagnostic("quote-style", "q", 2, 1))
        report.add(Diagnostic("naming", "n", 1, 9))
        report.add(Diagnostic("line-length", "l", 1, 9))
        report.sort()
        assert [d.rule_id for d in report.diagnostics] == ["line-length", "naming", "quote-style"]

    def test_counts(self):
        report = LintReport(path="a.lua")
        assert not report.has_issues
        report.add(Diagnostic("syntax-error", "x", 1, 1, severity=Severity.ERROR))
        report.add(Diagnostic("blank-lines", "x", 4, 1, severity=Severity.INFO))
        assert (report.error_count, report.warning_count, report.info_count) == (1, 0, 1)
        assert report.has_issues


def test_summarize():
    clean = LintReport(path="a.lua")
    dirty = LintReport(path="b.lua")
    dirty.add(Diagnostic("naming", "x", 1, 1))
    dirty.add(Diagnostic("naming", "y", 2, 1))
    summary = summarize([clean, dirty])
    assert summary.files_checked == 2
    assert summary.files_with_issues == 1
    assert summary.warnings == 2
    assert summary.total == 2
    assert summary.by_rule == {"naming": 2}
