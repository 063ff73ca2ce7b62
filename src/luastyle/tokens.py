"""
Token Types for luastyle

The lexer turns source text into a flat list of Token objects.
Comments are kept as tokens, whitespace is not: style rules recover the
whitespace between two tokens from their offsets into the source.

ARCHITECTURAL RULE:
    A token's `value` is the exact source text it covers.
    Quotes, comment markers and long-bracket delimiters are NOT stripped.
    Rules that care about the decoded content do it themselves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet


class TokenKind(Enum):
    """
    Token categories.

    Keep this coarse. Operators and punctuation share one kind and are
    told apart by value; keywords share one kind and are told apart by
    value as well.
    """

    NAME = "name"
    KEYWORD = "keyword"
    NUMBER = "number"
    STRING = "string"
    LONG_STRING = "long_string"
    COMMENT = "comment"
    OPERATOR = "operator"
    EOF = "eof"


KEYWORDS: FrozenSet[str] = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "if", "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while",
    # Luau
    "continue",
})

# Longest first: the lexer tries these in order.
OPERATORS = (
    "...", "//=", "..=",
    "..", "==", "~=", "<=", ">=", "->", "::", "//",
    "+=", "-=", "*=", "/=", "%=", "^=",
    "+", "-", "*", "/", "%", "^", "#", "&", "|", "~", "<", ">", "=",
    "(", ")", "{", "}", "[", "]", ";", ":", ",", ".", "?",
)

BINARY_OPERATORS: FrozenSet[str] = frozenset({
    "+", "-", "*", "/", "//", "%", "^", "..",
    "==", "~=", "<", "<=", ">", ">=",
    "and", "or",
})

COMPOUND_ASSIGNMENT_OPERATORS: FrozenSet[str] = frozenset({
    "+=", "-=", "*=", "/=", "//=", "%=", "^=", "..=",
})

UNARY_OPERATORS: FrozenSet[str] = frozenset({"-", "not", "#"})

_VALUE_KEYWORDS = frozenset({"true", "false", "nil"})
_CLOSING_PUNCTUATION = frozenset({")", "]", "}", "..."})


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Properties:
        kind: TokenKind
        value: Exact source text of the token
        line, column: 1-based position of the first character
        end_line, end_column: 1-based position just past the last character
        offset: 0-based index of the first character in the source
    """

    kind: TokenKind
    value: str
    line: int
    column: int
    end_line: int
    end_column: int
    offset: int

    @property
    def end_offset(self) -> int:
        return self.offset + len(self.value)

    def is_keyword(self, *words: str) -> bool:
        return self.kind == TokenKind.KEYWORD and (not words or self.value in words)

    def is_operator(self, *ops: str) -> bool:
        return self.kind == TokenKind.OPERATOR and (not ops or self.value in ops)

    @property
    def is_string(self) -> bool:
        return self.kind in (TokenKind.STRING, TokenKind.LONG_STRING)

    @property
    def is_multiline(self) -> bool:
        return self.end_line > self.line

    @property
    def ends_value(self) -> bool:
        """
        True if an expression can end with this token.

        An operator that follows such a token is binary; otherwise it is
        unary (`-x`, `not x`, `#t`).
        """
        if self.kind in (TokenKind.NAME, TokenKind.NUMBER, TokenKind.STRING, TokenKind.LONG_STRING):
            return True
        if self.kind == TokenKind.KEYWORD:
            return self.value in _VALUE_KEYWORDS
        if self.kind == TokenKind.OPERATOR:
            return self.value in _CLOSING_PUNCTUATION
        return False
