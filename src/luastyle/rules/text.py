"""
Raw-text rules.

These run on source lines alone, so they still work when the file does not
lex or parse.
"""

import re
from typing import Iterable

from luastyle.diagnostics import Diagnostic, Severity
from luastyle.rules.base import LintContext, Rule


_LEADING_WHITESPACE = re.compile(r"[ \t]*")


class TrailingWhitespace(Rule):
    rule_id = "trailing-whitespace"
    description = "Lines must not end with spaces or tabs."
    layer = "text"
    good = 'local name = "value"\n'
    bad = 'local name = "value"   \n'

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for number, line in enumerate(context.lines, start=1):
            if number in context.open_lines:
                continue
            stripped = line.rstrip(" \t")
            if stripped != line:
                yield self.diagnostic(
                    context, number, len(stripped) + 1, "Trailing whitespace",
                    number, len(line) + 1,
                )


class LineLength(Rule):
    rule_id = "line-length"
    description = "Lines must fit within max_line_length columns (tabs count as tab_width)."
    layer = "text"
    good = "local message = string.format(\n\t\"%s: %s\",\n\tprefix,\n\tbody\n)\n"
    bad = "local message = string.format(\"%s: %s\", prefix, body) -- imagine this runs past the limit\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        limit = context.config.max_line_length
        tab_width = context.config.tab_width
        for number, line in enumerate(context.lines, start=1):
            width = len(line.expandtabs(tab_width))
            if width <= limit:
                continue
            column = 0
            for index, ch in enumerate(line):
                column = column + tab_width - column % tab_width if ch == "\t" else column + 1
                if column > limit:
                    break
            yield self.diagnostic(
                context, number, index + 1,
                f"Line is {width} columns long (limit {limit})",
            )


class Indentation(Rule):
    rule_id = "indentation"
    description = "Indent with the configured style (tabs by default) and never mix tabs and spaces."
    layer = "text"
    good = "if ready then\n\tstart()\nend\n"
    bad = "if ready then\n    start()\nend\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        use_tabs = context.config.indent == "tabs"
        width = context.config.indent_width
        for number, line in enumerate(context.lines, start=1):
            if number in context.continued_lines or not line.strip():
                continue
            leading = _LEADING_WHITESPACE.match(line).group(0)
            if not leading:
                continue
            if use_tabs and " " in leading:
                message = "Indent with tabs, not spaces" if "\t" not in leading \
                    else "Mixed tabs and spaces in indentation"
                yield self.diagnostic(context, number, 1, message, number, len(leading) + 1)
            elif not use_tabs and "\t" in leading:
                message = "Indent with spaces, not tabs" if " " not in leading \
                    else "Mixed tabs and spaces in indentation"
                yield self.diagnostic(context, number, 1, message, number, len(leading) + 1)
            elif not use_tabs and len(leading) % width:
                yield self.diagnostic(
                    context, number, 1,
                    f"Indentation of {len(leading)} spaces is not a multiple of {width}",
                    number, len(leading) + 1,
                )


class FinalNewline(Rule):
    rule_id = "final-newline"
    description = "Files end with exactly one newline."
    layer = "text"
    good = "return Module\n"
    bad = "return Module"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        source = context.source.replace("\r\n", "\n")
        if context.fragment or not source:
            return
        if not source.endswith("\n"):
            last = len(context.lines)
            yield self.diagnostic(
                context, last, len(context.lines[-1]) + 1, "No newline at end of file",
            )
            return
        stripped = source.rstrip("\n")
        if len(source) - len(stripped) > 1:
            extra_line = stripped.count("\n") + 2
            yield self.diagnostic(context, extra_line, 1, "Extra blank lines at end of file")


class BlankLines(Rule):
    rule_id = "blank-lines"
    description = "At most max_blank_lines consecutive blank lines."
    layer = "text"
    default_severity = Severity.INFO
    good = "local a = 1\n\nlocal b = 2\n"
    bad = "local a = 1\n\n\n\nlocal b = 2\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        limit = context.config.max_blank_lines
        run = 0
        for number, line in enumerate(context.lines, start=1):
            if line.strip() or number in context.continued_lines:
                run = 0
                continue
            run += 1
            if run == limit + 1:
                yield self.diagnostic(
                    context, number, 1,
                    f"Too many blank lines (more than {limit})",
                )
