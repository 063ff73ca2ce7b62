"""
Serialization helpers for lint results (Diagnostic, LintReport, LintSummary).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
The document layout is stable so other tools can consume it:

    {
      "reports": [
        {"path": ..., "lines_checked": ..., "parsed": ..., "diagnostics": [...]}
      ],
      "summary": {"files_checked": ..., "errors": ..., ...}
    }
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from luastyle.diagnostics import Diagnostic, LintReport, LintSummary, Severity, summarize


def diagnostic_to_dict(d: Diagnostic) -> Dict[str, Any]:
    data = {
        "rule": d.rule_id,
        "severity": d.severity.value,
        "path": d.path,
        "line": d.line,
        "column": d.column,
        "message": d.message,
    }
    if d.end_line is not None:
        data["end_line"] = d.end_line
        data["end_column"] = d.end_column
    return data


def diagnostic_from_dict(d: Dict[str, Any]) -> Diagnostic:
    return Diagnostic(
        rule_id=d["rule"],
        message=d.get("message", ""),
        line=d["line"],
        column=d["column"],
        severity=Severity(d.get("severity", Severity.WARNING.value)),
        path=d.get("path"),
        end_line=d.get("end_line"),
        end_column=d.get("end_column"),
    )


def report_to_dict(r: LintReport) -> Dict[str, Any]:
    return {
        "path": r.path,
        "lines_checked": r.lines_checked,
        "parsed": r.parsed,
        "diagnostics": [diagnostic_to_dict(d) for d in r.diagnostics],
    }


def report_from_dict(d: Dict[str, Any]) -> LintReport:
    return LintReport(
        path=d.get("path"),
        diagnostics=[diagnostic_from_dict(item) for item in d.get("diagnostics", [])],
        lines_checked=d.get("lines_checked", 0),
        parsed=d.get("parsed", False),
    )


def summary_to_dict(s: LintSummary) -> Dict[str, Any]:
    return {
        "files_checked": s.files_checked,
        "files_with_issues": s.files_with_issues,
        "errors": s.errors,
        "warnings": s.warnings,
        "infos": s.infos,
        "total": s.total,
        "by_rule": dict(s.by_rule),
    }


def reports_to_dict(reports: List[LintReport]) -> Dict[str, Any]:
    return {
        "reports": [report_to_dict(r) for r in reports],
        "summary": summary_to_dict(summarize(reports)),
    }


def reports_from_dict(d: Dict[str, Any]) -> List[LintReport]:
    if not isinstance(d, dict):
        raise TypeError(f"Expected a mapping of lint results, got {type(d).__name__}")
    return [report_from_dict(r) for r in d.get("reports", [])]


def reports_to_json(reports: List[LintReport]) -> str:
    return json.dumps(reports_to_dict(reports), sort_keys=True, indent=2)


def reports_from_json(s: str) -> List[LintReport]:
    d = json.loads(s)
    return reports_from_dict(d)


def reports_to_yaml(reports: List[LintReport]) -> str:
    return yaml.safe_dump(reports_to_dict(reports), sort_keys=False)


def reports_from_yaml(s: str) -> List[LintReport]:
    d = yaml.safe_load(s)
    return reports_from_dict(d)
