"""
Diagnostics and lint reports.

A Diagnostic is one style violation at one source position.
A LintReport collects the diagnostics for one file; a LintSummary
aggregates reports for a whole run.

IMPORTANT: These objects are read-only results. Producing them is the
rule engine's job, formatting them is the reporters' job.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple


@total_ordering
class Severity(Enum):
    """
    Diagnostic severities.

    Ordered by rank (ERROR < WARNING < INFO), so sorting puts the most severe first.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, value: str) -> "Severity":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown severity {value!r}; expected one of: {', '.join(s.value for s in cls)}"
            )


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(frozen=True)
class Diagnostic:
    """
    A single style violation.

    Properties:
        rule_id: Id of the rule that produced it (e.g. "quote-style")
        message: Human-readable explanation
        line, column: 1-based start position
        severity: Severity after config overrides
        path: File the diagnostic belongs to (None for in-memory source)
        end_line, end_column: Optional end position (exclusive)
    """

    rule_id: str
    message: str
    line: int
    column: int
    severity: Severity = Severity.WARNING
    path: Optional[str] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def sort_key(self) -> Tuple[str, int, int, str]:
        return (self.path or "", self.line, self.column, self.rule_id)


@dataclass
class LintReport:
    """Diagnostics for one file."""

    path: Optional[str]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    lines_checked: int = 0
    parsed: bool = False
    _seen: Set[Diagnostic] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._seen.update(self.diagnostics)

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic, ignoring exact duplicates."""
        if diagnostic not in self._seen:
            self._seen.add(diagnostic)
            self.diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def discard(self, predicate: Callable[[Diagnostic], bool]) -> None:
        """Drop every diagnostic for which `predicate` is true."""
        self.diagnostics = [d for d in self.diagnostics if not predicate(d)]
        self._seen = set(self.diagnostics)

    def sort(self) -> None:
        self.diagnostics.sort(key=lambda d: d.sort_key)

    def count(self, severity: Severity) -> int:
        return sum(1 for d in self.diagnostics if d.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(Severity.INFO)

    @property
    def has_issues(self) -> bool:
        return bool(self.diagnostics)


@dataclass
class LintSummary:
    """Aggregate counts over a set of reports."""

    files_checked: int = 0
    files_with_issues: int = 0
    errors: int = 0
    warnings: int = 0
    infos: int = 0
    by_rule: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.errors + self.warnings + self.infos


def summarize(reports: Iterable[LintReport]) -> LintSummary:
    summary = LintSummary()
    by_rule: Counter = Counter()
    for report in reports:
        summary.files_checked += 1
        if report.has_issues:
            summary.files_with_issues += 1
        summary.errors += report.error_count
        summary.warnings += report.warning_count
        summary.infos += report.info_count
        by_rule.update(d.rule_id for d in report.diagnostics)
    summary.by_rule = dict(sorted(by_rule.items()))
    return summary
