"""
Whitespace rules between tokens.

All of these compare the raw gap between neighbouring tokens on the same
line. A gap that crosses a line break, or a neighbour that is a comment,
is never judged here.
"""

from typing import Dict, Iterable, List, Optional

from luastyle.diagnostics import Diagnostic
from luastyle.rules.base import LintContext, Rule
from luastyle.tokens import BINARY_OPERATORS, COMPOUND_ASSIGNMENT_OPERATORS, Token, TokenKind


_SPACED_OPERATORS = (BINARY_OPERATORS - {"and", "or"}) | COMPOUND_ASSIGNMENT_OPERATORS | {"="}
_UNARY_SYMBOLS = {"-", "#"}


def _is_code(tok: Optional[Token]) -> bool:
    return tok is not None and tok.kind not in (TokenKind.COMMENT, TokenKind.EOF)


def matching_braces(tokens: List[Token]) -> Dict[int, int]:
    """Map the index of every `{` to the index of its `}` (unbalanced ones are left out)."""
    pairs: Dict[int, int] = {}
    stack: List[int] = []
    for i, tok in enumerate(tokens):
        if tok.is_operator("{"):
            stack.append(i)
        elif tok.is_operator("}") and stack:
            pairs[stack.pop()] = i
    return pairs


class OperatorSpacing(Rule):
    rule_id = "operator-spacing"
    description = "Put one space around binary operators and '=', and none after unary '-' or '#'."
    layer = "token"
    good = "local total = price * count + 1\nlocal negative = -total\n"
    bad = "local total=price*count+1\nlocal negative = - total\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for index, prev, tok, nxt in context.token_pairs():
            if tok.kind != TokenKind.OPERATOR or index in context.type_tokens:
                continue
            if tok.value in _UNARY_SYMBOLS and not (prev is not None and prev.ends_value):
                if _is_code(nxt) and context.same_line(tok, nxt) and context.gap(tok, nxt):
                    yield self.at_token(context, tok, f"Unexpected space after unary '{tok.value}'")
                continue
            if tok.value not in _SPACED_OPERATORS:
                continue
            if _is_code(prev) and context.same_line(prev, tok) and not context.gap(prev, tok):
                yield self.at_token(context, tok, f"Missing space before '{tok.value}'")
            if _is_code(nxt) and context.same_line(tok, nxt) and not context.gap(tok, nxt):
                yield self.at_token(context, tok, f"Missing space after '{tok.value}'")


class CommaSpacing(Rule):
    rule_id = "comma-spacing"
    description = "No space before a comma, one space after it unless it ends the line."
    layer = "token"
    good = "print(a, b, c)\n"
    bad = "print(a ,b,c)\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for index, prev, tok, nxt in context.token_pairs():
            if not tok.is_operator(",") or index in context.type_tokens:
                continue
            if _is_code(prev) and context.same_line(prev, tok) and context.gap(prev, tok):
                yield self.at_token(context, tok, "Unexpected space before ','")
            if (_is_code(nxt) and context.same_line(tok, nxt) and not nxt.is_operator("}", ")", "]")
                    and not context.gap(tok, nxt)):
                yield self.at_token(context, tok, "Missing space after ','")


class BracketSpacing(Rule):
    rule_id = "bracket-spacing"
    description = (
        "No padding inside parentheses or square brackets; single-line tables are "
        "written { a, b } (or {a, b} with brace_spacing off) and empty tables as {}."
    )
    layer = "token"
    good = "local point = { x, y }\nprint(point[1])\nlocal empty = {}\n"
    bad = "local point = {x, y}\nprint( point[ 1 ] )\nlocal empty = { }\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.tokens or []
        braces = matching_braces(tokens)
        padded = context.config.brace_spacing

        for index, prev, tok, nxt in context.token_pairs():
            if index in context.type_tokens:
                continue
            if tok.is_operator("(", "[") and _is_code(nxt) and context.same_line(tok, nxt):
                if context.gap(tok, nxt) and not nxt.is_operator(")", "]"):
                    yield self.at_token(context, tok, f"Unexpected space after '{tok.value}'")
            elif tok.is_operator(")", "]") and _is_code(prev) and context.same_line(prev, tok):
                if context.gap(prev, tok) and not prev.is_operator("(", "["):
                    yield self.at_token(context, tok, f"Unexpected space before '{tok.value}'")
                elif context.gap(prev, tok):
                    yield self.at_token(context, tok, "Unexpected space inside empty brackets")
            elif tok.is_operator("{") and index in braces:
                close = tokens[braces[index]]
                if close.line != tok.line:
                    continue
                yield from self._check_single_line_table(context, tok, nxt, prev_of_close=tokens[braces[index] - 1],
                                                         close=close, padded=padded)

    def _check_single_line_table(self, context, open_tok, first_inner, prev_of_close, close, padded):
        if first_inner is close:
            if context.gap(open_tok, close):
                yield self.at_token(context, open_tok, "Write empty tables as {}")
            return
        if not _is_code(first_inner) or not _is_code(prev_of_close):
            return
        after_open = context.gap(open_tok, first_inner)
        before_close = context.gap(prev_of_close, close)
        if padded:
            if not after_open:
                yield self.at_token(context, open_tok, "Missing space after '{'")
            if not before_close:
                yield self.at_token(context, close, "Missing space before '}'")
        else:
            if after_open:
                yield self.at_token(context, open_tok, "Unexpected space after '{'")
            if before_close:
                yield self.at_token(context, close, "Unexpected space before '}'")


class CallSpacing(Rule):
    rule_id = "call-spacing"
    description = "No space between a function name (or 'function') and its opening parenthesis."
    layer = "token"
    good = "local function greet(name)\n\tprint(name)\nend\nlocal callback = function(value) end\n"
    bad = "local function greet (name)\n\tprint (name)\nend\nlocal callback = function (value) end\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for index, prev, tok, _nxt in context.token_pairs():
            if index in context.type_tokens:
                continue
            if not tok.is_operator("(") or not _is_code(prev) or not context.same_line(prev, tok):
                continue
            callee_like = (
                prev.kind in (TokenKind.NAME, TokenKind.STRING)
                or prev.is_operator(")", "]")
                or prev.is_keyword("function")
            )
            if callee_like and context.gap(prev, tok):
                yield self.at_token(context, tok, "Unexpected space before '('")


class Alignment(Rule):
    rule_id = "alignment"
    description = "Do not vertically align code; use a single space between tokens."
    layer = "token"
    good = "local short = 1\nlocal longerName = 2\n"
    bad = "local short      = 1\nlocal longerName = 2\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        for index, prev, tok, _nxt in context.token_pairs():
            if prev is None or index in context.type_tokens or not context.same_line(prev, tok):
                continue
            gap = context.gap(prev, tok)
            if len(gap) > 1 or "\t" in gap:
                yield self.diagnostic(
                    context, prev.end_line, prev.end_column,
                    "Extra whitespace between tokens (do not align code)",
                    tok.line, tok.column,
                )
