"""
Lexer (Layer 1: Source Text → Tokens).

Converts Lua / Luau source into a list of Token objects.

Syntax Notes:
    - Comments are emitted as COMMENT tokens, whitespace is dropped
    - Long brackets ([[ ]], [==[ ]==]) for strings and comments
    - Luau backtick strings are lexed as plain STRING tokens
    - A leading shebang line is skipped
"""

from typing import List

from luastyle.errors import LexError
from luastyle.tokens import KEYWORDS, OPERATORS, Token, TokenKind


_WHITESPACE = " \t\r\n\f\v"
_HEX_DIGITS = "0123456789abcdefABCDEF_"


class Lexer:
    """Single-pass tokenizer with line/column tracking."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    def _peek(self, offset: int = 0) -> str:
        pos = self.index + offset
        if pos >= self.length:
            return ""
        return self.source[pos]

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.index >= self.length:
                return
            ch = self.source[self.index]
            self.index += 1
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        if self.source.startswith("#!"):
            while self.index < self.length and self._peek() != "\n":
                self._advance()

        while True:
            while self._peek() and self._peek() in _WHITESPACE:
                self._advance()
            if self.index >= self.length:
                tokens.append(Token(TokenKind.EOF, "", self.line, self.column,
                                    self.line, self.column, self.index))
                return tokens
            tokens.append(self._next_token())

    def _make(self, kind: TokenKind, start: int, line: int, column: int) -> Token:
        return Token(
            kind=kind,
            value=self.source[start:self.index],
            line=line,
            column=column,
            end_line=self.line,
            end_column=self.column,
            offset=start,
        )

    def _next_token(self) -> Token:
        start, line, column = self.index, self.line, self.column
        ch = self._peek()

        if ch == "-" and self._peek(1) == "-":
            self._advance(2)
            level = self._long_bracket_level()
            if level >= 0:
                self._read_long_bracket(level, "Unterminated long comment", line, column)
            else:
                while self._peek() and self._peek() not in "\r\n":
                    self._advance()
            return self._make(TokenKind.COMMENT, start, line, column)

        if ch == "[":
            level = self._long_bracket_level()
            if level >= 0:
                self._read_long_bracket(level, "Unterminated long string", line, column)
                return self._make(TokenKind.LONG_STRING, start, line, column)

        if ch.isalpha() or ch == "_":
            while self._peek().isalnum() or self._peek() == "_":
                self._advance()
            word = self.source[start:self.index]
            kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.NAME
            return self._make(kind, start, line, column)

        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            self._read_number(line, column)
            return self._make(TokenKind.NUMBER, start, line, column)

        if ch in ("'", '"', "`"):
            self._read_string(ch, line, column)
            return self._make(TokenKind.STRING, start, line, column)

        for op in OPERATORS:
            if self.source.startswith(op, self.index):
                self._advance(len(op))
                return self._make(TokenKind.OPERATOR, start, line, column)

        raise LexError(f"Unexpected character {ch!r}", line, column)

    def _long_bracket_level(self) -> int:
        """Return the level of a long bracket opening at the cursor, or -1."""
        if self._peek() != "[":
            return -1
        level = 0
        while self._peek(1 + level) == "=":
            level += 1
        if self._peek(1 + level) == "[":
            return level
        return -1

    def _read_long_bracket(self, level: int, message: str, line: int, column: int) -> None:
        self._advance(level + 2)
        closing = "]" + "=" * level + "]"
        end = self.source.find(closing, self.index)
        if end < 0:
            raise LexError(message, line, column)
        self._advance(end - self.index + len(closing))

    def _read_number(self, line: int, column: int) -> None:
        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance(2)
            while self._peek() and self._peek() in _HEX_DIGITS + ".":
                self._advance()
            if self._peek() in ("p", "P"):
                self._read_exponent()
        elif self._peek() == "0" and self._peek(1) in ("b", "B"):
            self._advance(2)
            while self._peek() and self._peek() in "01_":
                self._advance()
        else:
            while self._peek().isdigit() or self._peek() == "_":
                self._advance()
            if self._peek() == "." and self._peek(1) != ".":
                self._advance()
                while self._peek().isdigit() or self._peek() == "_":
                    self._advance()
            if self._peek() in ("e", "E"):
                self._read_exponent()

        if self._peek().isalnum() or self._peek() == "_":
            raise LexError("Malformed number", line, column)

    def _read_exponent(self) -> None:
        self._advance()
        if self._peek() in ("+", "-"):
            self._advance()
        while self._peek().isdigit():
            self._advance()

    def _read_string(self, quote: str, line: int, column: int) -> None:
        self._advance()
        while True:
            ch = self._peek()
            if ch == "":
                raise LexError("Unterminated string", line, column)
            if ch == "\\":
                self._advance()
                if self._peek() == "":
                    raise LexError("Unterminated string", line, column)
                self._advance()
                continue
            if ch == "\n" and quote != "`":
                raise LexError("Unterminated string", line, column)
            self._advance()
            if ch == quote:
                return


def tokenize(source: str) -> List[Token]:
    """
    Tokenize Lua source.

    Args:
        source: Source text (without a byte order mark)

    Returns:
        Tokens in source order, terminated by a single EOF token

    Raises:
        LexError: On unterminated strings/comments or unexpected characters
    """
    return Lexer(source).tokenize()


__all__ = ["Lexer", "tokenize", "LexError"]
