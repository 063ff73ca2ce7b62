"""
Rules that need the syntax tree.
"""

from typing import Iterable, List, Optional

from luastyle.diagnostics import Diagnostic
from luastyle.rules.base import LintContext, Rule
from luastyle.syntax import (
    Block,
    EmptyStatement,
    FunctionDeclaration,
    FunctionExpression,
    If,
    IfExpression,
    LocalAssignment,
    LocalFunction,
    Node,
    Parenthesized,
    Repeat,
    Statement,
    TableConstructor,
    While,
    iter_functions,
    walk,
)


def function_name(owner: Node) -> str:
    """Readable name of the function a body belongs to."""
    if isinstance(owner, FunctionDeclaration):
        name = ".".join(owner.path)
        return f"{name}:{owner.method}" if owner.method else name
    if isinstance(owner, LocalFunction):
        return owner.name.name
    return "anonymous function"


class TrailingComma(Rule):
    rule_id = "trailing-comma"
    description = "Multi-line tables end with a trailing comma; single-line tables do not."
    layer = "syntax"
    good = "local config = {\n\tname = \"demo\",\n\tsize = 3,\n}\nlocal pair = { 1, 2 }\n"
    bad = "local config = {\n\tname = \"demo\",\n\tsize = 3\n}\nlocal pair = { 1, 2, }\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.chunk.tokens
        for node in walk(context.chunk.body):
            if not isinstance(node, TableConstructor) or not node.fields:
                continue
            open_tok = tokens[node.first]
            close_tok = tokens[node.last]
            last_field = node.fields[-1]
            trailing = bool(node.separators) and node.separators[-1] > last_field.last

            if close_tok.line == open_tok.line:
                if trailing:
                    yield self.at_token(
                        context, tokens[node.separators[-1]],
                        "Remove the trailing separator in a single-line table",
                    )
                continue

            last_tok = tokens[last_field.last]
            if not trailing and close_tok.line > last_tok.end_line:
                yield self.diagnostic(
                    context, last_tok.end_line, last_tok.end_column,
                    "Add a trailing comma after the last field of a multi-line table",
                )


class MaxArguments(Rule):
    rule_id = "max-arguments"
    description = "Functions declare at most max_arguments parameters; pass a table for more."
    layer = "syntax"
    good = "local function spawn(options)\nend\n"
    bad = "local function spawn(name, x, y, z, health, speed)\nend\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        limit = context.config.max_arguments
        tokens = context.chunk.tokens
        for owner, function in iter_functions(context.chunk.body):
            count = len(function.parameters)
            if count > limit:
                yield self.at_token(
                    context, tokens[function.open_paren],
                    f"'{function_name(owner)}' declares {count} parameters (limit {limit})",
                )


class ConditionParentheses(Rule):
    rule_id = "condition-parentheses"
    description = "Do not wrap a whole if / elseif / while / until condition in parentheses."
    layer = "syntax"
    good = "if ready and not paused then\n\tstep()\nend\n"
    bad = "if (ready and not paused) then\n\tstep()\nend\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.chunk.tokens
        for node in walk(context.chunk.body):
            conditions: List[tuple] = []
            if isinstance(node, If):
                for clause in node.clauses:
                    conditions.append((tokens[clause.keyword].value, clause.condition))
            elif isinstance(node, While):
                conditions.append(("while", node.condition))
            elif isinstance(node, Repeat):
                conditions.append(("until", node.condition))
            elif isinstance(node, IfExpression):
                conditions.extend(("if", c) for c in node.conditions)
            for keyword, condition in conditions:
                if isinstance(condition, Parenthesized):
                    yield self.at_token(
                        context, tokens[condition.first],
                        f"Remove the parentheses around the '{keyword}' condition",
                    )


class LocalFunctionStyle(Rule):
    rule_id = "local-function"
    description = "Declare local functions with 'local function name()' rather than assigning a function expression."
    layer = "syntax"
    good = "local function update(dt)\nend\n"
    bad = "local update = function(dt)\nend\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.chunk.tokens
        for node in walk(context.chunk.body):
            if (isinstance(node, LocalAssignment) and len(node.names) == 1 and len(node.values) == 1
                    and isinstance(node.values[0], FunctionExpression)):
                name = node.names[0].name
                yield self.at_token(
                    context, tokens[node.first],
                    f"Use 'local function {name}' instead of assigning a function expression",
                )


class OneStatementPerLine(Rule):
    rule_id = "one-statement-per-line"
    description = "Put each statement on its own line."
    layer = "syntax"
    good = "local a = 1\nlocal b = 2\n"
    bad = "local a = 1 local b = 2\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.chunk.tokens
        for node in walk(context.chunk.body):
            if not isinstance(node, Block):
                continue
            previous: Optional[Statement] = None
            for statement in node.statements:
                if isinstance(statement, EmptyStatement):
                    continue
                if previous is not None and tokens[statement.first].line == tokens[previous.last].end_line:
                    yield self.at_token(context, tokens[statement.first], "Put each statement on its own line")
                previous = statement


__all__ = [
    "TrailingComma",
    "MaxArguments",
    "ConditionParentheses",
    "LocalFunctionStyle",
    "OneStatementPerLine",
    "function_name",
]
