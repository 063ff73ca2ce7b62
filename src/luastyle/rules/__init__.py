"""Style rules and the rule registry."""

from typing import Dict, Iterable, List

from luastyle.diagnostics import Diagnostic, Severity
from luastyle.errors import UnknownRuleError
from luastyle.rules.base import LintContext, Rule
from luastyle.rules.lexical import CommentSpacing, QuoteStyle, Semicolons
from luastyle.rules.naming import Naming
from luastyle.rules.spacing import Alignment, BracketSpacing, CallSpacing, CommaSpacing, OperatorSpacing
from luastyle.rules.structure import (
    ConditionParentheses,
    LocalFunctionStyle,
    MaxArguments,
    OneStatementPerLine,
    TrailingComma,
)
from luastyle.rules.text import BlankLines, FinalNewline, Indentation, LineLength, TrailingWhitespace


class SyntaxErrorRule(Rule):
    """
    Placeholder for diagnostics the linter emits itself when the source does
    not lex or parse. It exists so the id can be listed and explained.
    """

    rule_id = "syntax-error"
    description = "The file must be valid Lua / Luau; other syntax-based rules are skipped until it is."
    layer = "engine"
    default_severity = Severity.ERROR
    good = "if ready then\n\tstart()\nend\n"
    bad = "if ready then\n\tstart()\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        return ()

    def can_run(self, context: LintContext) -> bool:
        return False


ALL_RULES: List[Rule] = [
    SyntaxErrorRule(),
    # text
    TrailingWhitespace(),
    LineLength(),
    Indentation(),
    FinalNewline(),
    BlankLines(),
    # token
    QuoteStyle(),
    OperatorSpacing(),
    CommaSpacing(),
    BracketSpacing(),
    CallSpacing(),
    Semicolons(),
    CommentSpacing(),
    Alignment(),
    # syntax
    TrailingComma(),
    MaxArguments(),
    ConditionParentheses(),
    Naming(),
    LocalFunctionStyle(),
    OneStatementPerLine(),
]

RULES_BY_ID: Dict[str, Rule] = {rule.rule_id: rule for rule in ALL_RULES}

SYNTAX_ERROR = RULES_BY_ID["syntax-error"]


def get_rule(rule_id: str) -> Rule:
    """
    Look up a rule by id.

    Raises:
        UnknownRuleError: If no rule has that id
    """
    try:
        return RULES_BY_ID[rule_id]
    except KeyError:
        raise UnknownRuleError(rule_id)


__all__ = [
    "ALL_RULES",
    "RULES_BY_ID",
    "SYNTAX_ERROR",
    "LintContext",
    "Rule",
    "get_rule",
]
