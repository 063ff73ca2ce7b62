"""
Exception hierarchy for luastyle.

Source-level failures (LexError, ParseError) are turned into `syntax-error`
diagnostics by the linter. Everything else propagates to the caller.
"""


class LuastyleError(Exception):
    """Base class for all luastyle errors."""
    pass


class SourceError(LuastyleError):
    """An error tied to a position in Lua source."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} (line {line}, column {column})")
        self.message = message
        self.line = line
        self.column = column


class LexError(SourceError):
    """Raised when source text cannot be tokenized."""
    pass


class ParseError(SourceError):
    """Raised when the token stream does not form a valid chunk."""
    pass


class ConfigError(LuastyleError):
    """Raised when a configuration file or option is invalid."""
    pass


class UnknownRuleError(ConfigError):
    """Raised when a rule id is not registered."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Unknown rule: {rule_id}")
        self.rule_id = rule_id


class LintIOError(LuastyleError):
    """Raised when a file to lint cannot be read."""
    pass
