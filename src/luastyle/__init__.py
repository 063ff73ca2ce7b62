"""
luastyle: a style checker for Lua and Luau

Checks source code against a written style guide (formatting, whitespace,
quoting, naming, table and function conventions) and reports violations
with stable rule ids.

ARCHITECTURAL LAYERS:
---------------------
    1. Tokenizer / Parser   lexer, tokens, syntax, parser
    2. Rule Engine          rules, linter
    3. Reporter             reporters, serialization

Rules never format output and reporters never inspect source; they meet
only at Diagnostic / LintReport.

This package does NOT rewrite code. It reports; it never fixes.
"""

__version__ = "0.1.0"

from luastyle.config import DEFAULT_CONFIG, LintConfig, load_config, resolve_config
from luastyle.diagnostics import Diagnostic, LintReport, LintSummary, Severity, summarize
from luastyle.errors import ConfigError, LexError, LintIOError, LuastyleError, ParseError
from luastyle.linter import lint_file, lint_paths, lint_source

__all__ = [
    "__version__",
    "DEFAULT_CONFIG",
    "LintConfig",
    "load_config",
    "resolve_config",
    "Diagnostic",
    "LintReport",
    "LintSummary",
    "Severity",
    "summarize",
    "ConfigError",
    "LexError",
    "LintIOError",
    "LuastyleError",
    "ParseError",
    "lint_file",
    "lint_paths",
    "lint_source",
]
