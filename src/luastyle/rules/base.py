"""Base class and shared context for lint rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional, Set

from luastyle.diagnostics import Diagnostic, Severity
from luastyle.syntax import Chunk
from luastyle.tokens import Token, TokenKind

if TYPE_CHECKING:
    from luastyle.config import LintConfig


class LintContext:
    """
    Everything a rule may inspect for one source file.

    Properties:
        source: Full source text
        lines: Source lines without line terminators
        tokens: Token list, or None if lexing failed
        chunk: Syntax tree, or None if lexing or parsing failed
        config: Effective LintConfig
        path: File path for diagnostics (None for in-memory source)
        fragment: True when linting a code block embedded in another file
    """

    def __init__(
        self,
        source: str,
        config: "LintConfig",
        tokens: Optional[List[Token]] = None,
        chunk: Optional[Chunk] = None,
        path: Optional[str] = None,
        fragment: bool = False,
    ) -> None:
        self.source = source
        self.lines = split_lines(source)
        self.tokens = tokens
        self.chunk = chunk
        self.config = config
        self.path = path
        self.fragment = fragment

        # Lines that begin / end inside a multi-line string or comment
        self.continued_lines: Set[int] = set()
        self.open_lines: Set[int] = set()
        for tok in tokens or ():
            if tok.is_multiline and tok.kind in (TokenKind.STRING, TokenKind.LONG_STRING, TokenKind.COMMENT):
                self.continued_lines.update(range(tok.line + 1, tok.end_line + 1))
                self.open_lines.update(range(tok.line, tok.end_line))

        type_tokens: Set[int] = set()
        if chunk is not None:
            for first, last in chunk.type_spans:
                type_tokens.update(range(first, last + 1))
        self.type_tokens: FrozenSet[int] = frozenset(type_tokens)

    def gap(self, left: Token, right: Token) -> str:
        """Raw source text between two tokens."""
        return self.source[left.end_offset:right.offset]

    def same_line(self, left: Token, right: Token) -> bool:
        return left.end_line == right.line

    def token_pairs(self) -> Iterable[tuple]:
        """Yield (index, previous, token, next) over the token list, EOF excluded."""
        tokens = self.tokens or []
        for i, tok in enumerate(tokens):
            if tok.kind == TokenKind.EOF:
                return
            prev = tokens[i - 1] if i > 0 else None
            nxt = tokens[i + 1] if i + 1 < len(tokens) else None
            yield i, prev, tok, nxt


def split_lines(source: str) -> List[str]:
    """Split on "\\n", dropping the empty tail after a final newline and any "\\r"."""
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Rule(ABC):
    """
    Base class for style rules.

    Subclasses set the class attributes and implement check().

    Properties:
        rule_id: Stable kebab-case id used in config and output
        description: One-line summary of the convention
        layer: "text" (raw lines), "token" (token list) or "syntax" (tree)
        default_severity: Severity unless the config overrides it
        good / bad: Example snippets shown by `--explain`
    """

    rule_id: str = ""
    description: str = ""
    layer: str = "text"
    default_severity: Severity = Severity.WARNING
    good: str = ""
    bad: str = ""

    @abstractmethod
    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        """
        Apply this rule to the given context.

        Args:
            context: Source, tokens and tree for one file

        Returns:
            Diagnostics found (possibly a generator)
        """
        pass

    def can_run(self, context: LintContext) -> bool:
        if self.layer == "token":
            return context.tokens is not None
        if self.layer == "syntax":
            return context.chunk is not None
        return True

    def diagnostic(
        self,
        context: LintContext,
        line: int,
        column: int,
        message: str,
        end_line: Optional[int] = None,
        end_column: Optional[int] = None,
    ) -> Diagnostic:
        return Diagnostic(
            rule_id=self.rule_id,
            message=message,
            line=line,
            column=column,
            severity=context.config.severity_for(self.rule_id, self.default_severity),
            path=context.path,
            end_line=end_line,
            end_column=end_column,
        )

    def at_token(self, context: LintContext, tok: Token, message: str) -> Diagnostic:
        return self.diagnostic(context, tok.line, tok.column, message, tok.end_line, tok.end_column)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.rule_id!r})"
