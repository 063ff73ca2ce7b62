"""
Rules about individual tokens: string delimiters, semicolons, comments.
"""

import re
from typing import Iterable, List

from luastyle.diagnostics import Diagnostic, Severity
from luastyle.rules.base import LintContext, Rule
from luastyle.tokens import TokenKind


_LONG_COMMENT = re.compile(r"--\[=*\[")
_SEPARATOR = re.compile(r"[^\w\s]{2,}\s*$")
_QUOTES = {"double": '"', "single": "'"}


class QuoteStyle(Rule):
    rule_id = "quote-style"
    description = (
        "Use double quotes for strings, unless the string itself contains a "
        "double quote and single quotes avoid escaping."
    )
    layer = "token"
    good = "local greeting = \"Hello\"\nlocal quoted = 'He said \"hi\"'\n"
    bad = "local greeting = 'Hello'\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        preferred = _QUOTES[context.config.quote]
        other = _QUOTES["single" if context.config.quote == "double" else "double"]
        for _, _prev, tok, _nxt in context.token_pairs():
            if tok.kind != TokenKind.STRING or not tok.value.startswith(other):
                continue
            content = tok.value[1:-1]
            if preferred in content:
                continue
            yield self.at_token(
                context, tok,
                f"Use {context.config.quote} quotes ({preferred}) for strings",
            )


class Semicolons(Rule):
    rule_id = "semicolons"
    description = "Do not end statements with ';' and separate table fields with ',' instead of ';'."
    layer = "token"
    good = "local a = 1\nlocal t = { 1, 2 }\n"
    bad = "local a = 1;\nlocal t = { 1; 2 }\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        brackets: List[str] = []
        for _, _prev, tok, _nxt in context.token_pairs():
            if tok.kind != TokenKind.OPERATOR:
                continue
            if tok.value in ("(", "[", "{"):
                brackets.append(tok.value)
            elif tok.value in (")", "]", "}"):
                if brackets:
                    brackets.pop()
            elif tok.value == ";":
                if brackets and brackets[-1] == "{":
                    yield self.at_token(context, tok, "Use ',' instead of ';' to separate table fields")
                else:
                    yield self.at_token(context, tok, "Unnecessary semicolon")


class CommentSpacing(Rule):
    rule_id = "comment-spacing"
    description = (
        "Put a space after '--' in line comments. Doc comments (---), separator "
        "lines, directives (--!strict) and block comments are exempt."
    )
    layer = "token"
    default_severity = Severity.INFO
    good = "-- Clamp to the valid range\n"
    bad = "--Clamp to the valid range\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for _, _prev, tok, _nxt in context.token_pairs():
            if tok.kind != TokenKind.COMMENT or _LONG_COMMENT.match(tok.value):
                continue
            body = tok.value[2:]
            if not body or body[0] in " \t-!" or _SEPARATOR.match(body):
                continue
            yield self.diagnostic(
                context, tok.line, tok.column + 2, "Put a space after '--'",
            )
