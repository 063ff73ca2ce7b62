"""
Command-line interface.

    luastyle [PATHS...]            lint files and directories ("-" reads stdin)
    luastyle --list-rules          show every rule id
    luastyle --explain RULE        describe one rule with examples
    luastyle --check-docs ROOT     validate a documentation site

Exit codes:
    0  no error-severity diagnostics (and no warnings with --strict)
    1  violations found
    2  usage, configuration or IO error
"""

import argparse
import logging
import sys
import textwrap
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from luastyle import __version__
from luastyle.config import resolve_config, rule_list
from luastyle.diagnostics import Diagnostic, LintReport, Severity
from luastyle.docsite import check_site
from luastyle.errors import LuastyleError
from luastyle.linter import collect_files, lint_file, lint_source, read_source
from luastyle.logging_config import setup_logging
from luastyle.reporters import ReportFormat, render, save_report
from luastyle.rules import ALL_RULES, get_rule

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

STDIN_PATH = "<stdin>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luastyle",
        description="Check Lua and Luau source against the style guide.",
    )
    parser.add_argument("paths", nargs="*", help="Files or directories to lint ('-' for stdin; default: .)")
    parser.add_argument("--config", type=Path, help="Config file (default: nearest .luastyle.yml)")
    parser.add_argument("--format", choices=[f.value for f in ReportFormat], default=ReportFormat.TEXT.value,
                        help="Output format (default: text)")
    parser.add_argument("--output", "-o", help="Write the report to a file instead of stdout")
    parser.add_argument("--select", help="Comma-separated rule ids to run (default: all)")
    parser.add_argument("--ignore", help="Comma-separated rule ids to skip")
    parser.add_argument("--max-line-length", type=int, help="Override max_line_length")
    parser.add_argument("--indent", choices=["tabs", "spaces"], help="Override the indentation style")
    parser.add_argument("--markdown", action="store_true", help="Also lint Lua code blocks in Markdown files")
    parser.add_argument("--show-source", action="store_true", help="Print the offending line under each problem")
    parser.add_argument("--strict", action="store_true", help="Exit with 1 on warnings too")
    parser.add_argument("--list-rules", action="store_true", help="List every rule and exit")
    parser.add_argument("--explain", metavar="RULE", help="Describe a rule with examples and exit")
    parser.add_argument("--check-docs", metavar="ROOT", type=Path,
                        help="Validate the documentation site (mkdocs.yml + docs/) under ROOT")
    parser.add_argument("--log-file", help="Also write log messages to this file")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only; no summary line")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# =============================================================================
# INFORMATION COMMANDS
# =============================================================================


def list_rules() -> str:
    width = max(len(rule.rule_id) for rule in ALL_RULES)
    lines = []
    for rule in ALL_RULES:
        lines.append(
            f"{rule.rule_id.ljust(width)}  {rule.default_severity.value:<7}  {rule.layer:<6}  {rule.description}"
        )
    return "\n".join(lines) + "\n"


def explain_rule(rule_id: str) -> str:
    """Raises UnknownRuleError for an unknown id."""
    rule = get_rule(rule_id)
    parts = [
        f"{rule.rule_id} ({rule.layer}, default severity: {rule.default_severity.value})",
        "",
        textwrap.fill(rule.description, width=78),
    ]
    if rule.good:
        parts += ["", "Good:", textwrap.indent(rule.good.rstrip("\n"), "    ")]
    if rule.bad:
        parts += ["", "Bad:", textwrap.indent(rule.bad.rstrip("\n"), "    ")]
    return "\n".join(parts) + "\n"


# =============================================================================
# RUNS
# =============================================================================


def exit_code(reports: Sequence[LintReport], strict: bool = False) -> int:
    for report in reports:
        for d in report.diagnostics:
            if d.severity == Severity.ERROR or (strict and d.severity == Severity.WARNING):
                return EXIT_VIOLATIONS
    return EXIT_OK


def group_by_path(diagnostics: Sequence[Diagnostic]) -> List[LintReport]:
    grouped: "OrderedDict[str, LintReport]" = OrderedDict()
    for d in diagnostics:
        key = d.path or ""
        if key not in grouped:
            grouped[key] = LintReport(path=d.path, parsed=True)
        grouped[key].add(d)
    return list(grouped.values())


def _lint(args: argparse.Namespace, sources: Dict[str, str]) -> List[LintReport]:
    config = resolve_config(args.config)
    config = config.with_overrides(
        select=rule_list(args.select),
        ignore=rule_list(args.ignore),
        max_line_length=args.max_line_length,
        indent=args.indent,
        markdown=True if args.markdown else None,
    )

    paths = args.paths or ["."]
    reports: List[LintReport] = []
    files = [p for p in paths if p != "-"]
    if "-" in paths:
        text = sys.stdin.read()
        sources[STDIN_PATH] = text
        reports.append(lint_source(text, config, path=STDIN_PATH))

    for path in collect_files(files, config):
        report = lint_file(path, config)
        reports.append(report)
        if args.show_source:
            sources[str(path)] = read_source(path)
    logger.info("Linted %d file(s)", len(reports))
    return reports


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    setup_logging(level, args.log_file)

    try:
        if args.list_rules:
            sys.stdout.write(list_rules())
            return EXIT_OK
        if args.explain:
            sys.stdout.write(explain_rule(args.explain))
            return EXIT_OK

        sources: Dict[str, str] = {}
        if args.check_docs is not None:
            reports = group_by_path(check_site(args.check_docs))
            if not reports:
                reports = [LintReport(path=str(args.check_docs), parsed=True)]
        else:
            reports = _lint(args, sources)

        fmt = ReportFormat(args.format)
        if args.output:
            save_report(reports, args.output, fmt, show_source=args.show_source, sources=sources)
        else:
            sys.stdout.write(render(reports, fmt, show_source=args.show_source,
                                    summary=not args.quiet, sources=sources))
    except LuastyleError as e:
        print(f"luastyle: error: {e}", file=sys.stderr)
        return EXIT_ERROR

    return exit_code(reports, strict=args.strict)


if __name__ == "__main__":
    sys.exit(main())
