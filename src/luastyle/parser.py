"""
Parser (Layer 1: Tokens → Syntax Tree).

Recursive descent over the Lua 5.1 grammar plus the Luau extensions the
style guide's examples use:
    - `continue`
    - compound assignment (`x += 1`)
    - if-expressions (`local y = if c then a else b`)
    - type annotations (`local x: number`, `function f(a: T): U`)
    - type aliases (`type T = ...`, `export type T = ...`)
    - type casts (`x :: T`)

Types are skipped as balanced token runs. They are not represented in the
tree; no rule inspects them.

Comments stay in the token list but the parser never sees them. Node
`first` / `last` indices always refer to the full token list.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from luastyle.errors import ParseError
from luastyle.lexer import tokenize
from luastyle.syntax import (
    Assignment,
    BinaryOperation,
    Block,
    BooleanLiteral,
    Break,
    Call,
    CallStatement,
    Chunk,
    CompoundAssignment,
    Continue,
    Do,
    EmptyStatement,
    Expression,
    FunctionBody,
    FunctionDeclaration,
    FunctionExpression,
    GenericFor,
    If,
    IfClause,
    IfExpression,
    Index,
    LocalAssignment,
    LocalFunction,
    MethodCall,
    Name,
    NilLiteral,
    NumberLiteral,
    NumericFor,
    Parameter,
    Parenthesized,
    Repeat,
    Return,
    Statement,
    StringLiteral,
    TableConstructor,
    TableField,
    TypeAlias,
    UnaryOperation,
    Vararg,
    While,
)
from luastyle.tokens import COMPOUND_ASSIGNMENT_OPERATORS, Token, TokenKind


# (left priority, right priority), from the Lua reference manual
_BINARY_PRIORITY: Dict[str, Tuple[int, int]] = {
    "or": (1, 1),
    "and": (2, 2),
    "==": (3, 3), "~=": (3, 3), "<": (3, 3), "<=": (3, 3), ">": (3, 3), ">=": (3, 3),
    "..": (5, 4),
    "+": (6, 6), "-": (6, 6),
    "*": (7, 7), "/": (7, 7), "//": (7, 7), "%": (7, 7),
    "^": (10, 9),
}
_UNARY_PRIORITY = 8

_BLOCK_END = {"end", "else", "elseif", "until"}
_BRACKETS = {"(": ")", "[": "]", "{": "}", "<": ">"}


class Parser:
    """
    Builds a Chunk from a token list.

    The parser walks only the significant tokens (everything but comments)
    through `self._significant`, a list of indices into `self.tokens`.
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = list(tokens)
        self._significant = [i for i, tok in enumerate(self.tokens) if tok.kind != TokenKind.COMMENT]
        self._pos = 0
        self._previous = -1
        self.type_spans: List[Tuple[int, int]] = []

    # =========================================================================
    # TOKEN CURSOR
    # =========================================================================

    @property
    def _index(self) -> int:
        """Full token-list index of the current token."""
        return self._significant[self._pos]

    def _current(self) -> Token:
        return self.tokens[self._index]

    def _peek(self, offset: int = 1) -> Token:
        pos = min(self._pos + offset, len(self._significant) - 1)
        return self.tokens[self._significant[pos]]

    def _advance(self) -> Token:
        tok = self._current()
        self._previous = self._index
        if tok.kind != TokenKind.EOF:
            self._pos += 1
        return tok

    def _check(self, value: str) -> bool:
        tok = self._current()
        return tok.kind in (TokenKind.OPERATOR, TokenKind.KEYWORD) and tok.value == value

    def _match(self, value: str) -> bool:
        if self._check(value):
            self._advance()
            return True
        return False

    def _expect(self, value: str, context: str) -> Token:
        if self._check(value):
            return self._advance()
        raise self._error(f"Expected '{value}' {context}")

    def _expect_name(self, context: str) -> Token:
        if self._current().kind == TokenKind.NAME:
            return self._advance()
        raise self._error(f"Expected name {context}")

    def _error(self, message: str) -> ParseError:
        tok = self._current()
        found = "end of file" if tok.kind == TokenKind.EOF else repr(tok.value)
        return ParseError(f"{message}, found {found}", tok.line, tok.column)

    # =========================================================================
    # BLOCKS AND STATEMENTS
    # =========================================================================

    def parse_chunk(self) -> Chunk:
        body = self._block()
        if self._current().kind != TokenKind.EOF:
            raise self._error("Expected end of file")
        return Chunk(body=body, tokens=self.tokens, type_spans=self.type_spans)

    def _at_block_end(self) -> bool:
        tok = self._current()
        return tok.kind == TokenKind.EOF or (tok.kind == TokenKind.KEYWORD and tok.value in _BLOCK_END)

    def _block(self) -> Block:
        first = self._index
        statements: List[Statement] = []
        while not self._at_block_end():
            if self._check("return"):
                statements.append(self._return_statement())
                break
            statements.append(self._statement())
        last = statements[-1].last if statements else first - 1
        return Block(first=first, last=last, statements=statements)

    def _statement(self) -> Statement:
        tok = self._current()
        first = self._index

        if tok.is_operator(";"):
            self._advance()
            return EmptyStatement(first=first, last=first)

        if tok.kind == TokenKind.KEYWORD:
            handler = {
                "if": self._if_statement,
                "while": self._while_statement,
                "do": self._do_statement,
                "for": self._for_statement,
                "repeat": self._repeat_statement,
                "function": self._function_statement,
                "local": self._local_statement,
            }.get(tok.value)
            if handler is not None:
                return handler()
            if tok.value == "break":
                self._advance()
                return Break(first=first, last=first)
            if tok.value == "continue":
                self._advance()
                return Continue(first=first, last=first)

        if tok.kind == TokenKind.NAME:
            if tok.value == "type" and self._peek().kind == TokenKind.NAME:
                return self._type_alias(first, exported=False)
            if (tok.value == "export" and self._peek().kind == TokenKind.NAME
                    and self._peek().value == "type"):
                self._advance()
                return self._type_alias(first, exported=True)

        return self._expression_statement()

    def _return_statement(self) -> Return:
        first = self._index
        self._advance()
        values: List[Expression] = []
        if not self._at_block_end() and not self._check(";"):
            values = self._expression_list()
        self._match(";")
        return Return(first=first, last=self._previous, values=values)

    def _if_statement(self) -> If:
        first = self._index
        clauses: List[IfClause] = []
        keyword = self._index
        self._advance()
        while True:
            condition = self._expression()
            self._expect("then", "after condition")
            body = self._block()
            clauses.append(IfClause(first=keyword, last=self._previous, keyword=keyword,
                                    condition=condition, body=body))
            if self._check("elseif"):
                keyword = self._index
                self._advance()
                continue
            break
        else_body = None
        if self._match("else"):
            else_body = self._block()
        self._expect("end", "to close 'if'")
        return If(first=first, last=self._previous, clauses=clauses, else_body=else_body)

    def _while_statement(self) -> While:
        first = self._index
        self._advance()
        condition = self._expression()
        self._expect("do", "after 'while' condition")
        body = self._block()
        self._expect("end", "to close 'while'")
        return While(first=first, last=self._previous, condition=condition, body=body)

    def _do_statement(self) -> Do:
        first = self._index
        self._advance()
        body = self._block()
        self._expect("end", "to close 'do'")
        return Do(first=first, last=self._previous, body=body)

    def _repeat_statement(self) -> Repeat:
        first = self._index
        self._advance()
        body = self._block()
        self._expect("until", "to close 'repeat'")
        condition = self._expression()
        return Repeat(first=first, last=self._previous, body=body, condition=condition)

    def _for_statement(self) -> Statement:
        first = self._index
        self._advance()
        variables = [self._binding("in 'for' loop")]
        if self._match("="):
            start = self._expression()
            self._expect(",", "after 'for' start value")
            stop = self._expression()
            step = self._expression() if self._match(",") else None
            self._expect("do", "after 'for' range")
            body = self._block()
            self._expect("end", "to close 'for'")
            return NumericFor(first=first, last=self._previous, variable=variables[0],
                              start=start, stop=stop, step=step, body=body)

        while self._match(","):
            variables.append(self._binding("in 'for' loop"))
        self._expect("in", "in 'for' loop")
        iterators = self._expression_list()
        self._expect("do", "after 'for' iterators")
        body = self._block()
        self._expect("end", "to close 'for'")
        return GenericFor(first=first, last=self._previous, variables=variables,
                          iterators=iterators, body=body)

    def _function_statement(self) -> FunctionDeclaration:
        first = self._index
        self._advance()
        name_tok = self._expect_name("after 'function'")
        path = [name_tok.value]
        name_index = self._previous
        method = None
        while self._match("."):
            path.append(self._expect_name("after '.'").value)
            name_index = self._previous
        if self._match(":"):
            method = self._expect_name("after ':'").value
            name_index = self._previous
        function = self._function_body()
        return FunctionDeclaration(first=first, last=self._previous, path=path, method=method,
                                   name_index=name_index, function=function)

    def _local_statement(self) -> Statement:
        first = self._index
        self._advance()
        if self._match("function"):
            name_tok = self._expect_name("after 'local function'")
            name = Parameter(first=self._previous, last=self._previous, name=name_tok.value)
            function = self._function_body()
            return LocalFunction(first=first, last=self._previous, name=name, function=function)

        names = [self._binding("after 'local'")]
        while self._match(","):
            names.append(self._binding("after ','"))
        values: List[Expression] = []
        if self._match("="):
            values = self._expression_list()
        return LocalAssignment(first=first, last=self._previous, names=names, values=values)

    def _binding(self, context: str) -> Parameter:
        """A local / loop variable with an optional attribute and type."""
        name_tok = self._expect_name(context)
        index = self._previous
        if self._check("<") and self._peek().kind == TokenKind.NAME and self._peek(2).is_operator(">"):
            start = self._index
            self._advance()
            self._advance()
            self._advance()
            self.type_spans.append((start, self._previous))
        if self._match(":"):
            self._skip_type()
        return Parameter(first=index, last=self._previous, name=name_tok.value)

    def _type_alias(self, first: int, exported: bool) -> TypeAlias:
        self._advance()
        name = self._expect_name("in type alias").value
        if self._check("<"):
            self._skip_balanced()
        self._expect("=", "in type alias")
        self._skip_type()
        return TypeAlias(first=first, last=self._previous, name=name, exported=exported)

    def _expression_statement(self) -> Statement:
        first = self._index
        target = self._suffixed_expression()

        if self._check("=") or self._check(","):
            targets = [target]
            while self._match(","):
                targets.append(self._suffixed_expression())
            self._expect("=", "in assignment")
            for item in targets:
                if not isinstance(item, (Name, Index)):
                    raise ParseError("Cannot assign to this expression",
                                     self.tokens[item.first].line, self.tokens[item.first].column)
            values = self._expression_list()
            return Assignment(first=first, last=self._previous, targets=targets, values=values)

        tok = self._current()
        if tok.kind == TokenKind.OPERATOR and tok.value in COMPOUND_ASSIGNMENT_OPERATORS:
            self._advance()
            value = self._expression()
            return CompoundAssignment(first=first, last=self._previous, target=target,
                                      operator=tok.value, value=value)

        if isinstance(target, (Call, MethodCall)):
            return CallStatement(first=first, last=self._previous, call=target)

        raise self._error("Syntax error: expression is not a statement")

    # =========================================================================
    # FUNCTIONS
    # =========================================================================

    def _function_body(self) -> FunctionBody:
        if self._check("<"):
            self._skip_balanced()
        open_paren = self._index
        self._expect("(", "to open parameter list")
        parameters: List[Parameter] = []
        is_vararg = False
        if not self._check(")"):
            while True:
                if self._match("..."):
                    is_vararg = True
                    if self._match(":"):
                        self._skip_type()
                    break
                name_tok = self._expect_name("in parameter list")
                index = self._previous
                if self._match(":"):
                    self._skip_type()
                parameters.append(Parameter(first=index, last=self._previous, name=name_tok.value))
                if not self._match(","):
                    break
        self._expect(")", "to close parameter list")
        if self._match(":"):
            self._skip_type()
        body = self._block()
        self._expect("end", "to close function")
        return FunctionBody(first=open_paren, last=self._previous, parameters=parameters,
                            is_vararg=is_vararg, open_paren=open_paren, body=body)

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def _expression_list(self) -> List[Expression]:
        values = [self._expression()]
        while self._match(","):
            values.append(self._expression())
        return values

    def _expression(self, limit: int = 0) -> Expression:
        tok = self._current()
        first = self._index
        if (tok.kind == TokenKind.KEYWORD and tok.value == "not") or tok.is_operator("-", "#"):
            self._advance()
            operand = self._expression(_UNARY_PRIORITY)
            left: Expression = UnaryOperation(first=first, last=self._previous, operator=tok.value,
                                              operator_index=first, operand=operand)
        else:
            left = self._simple_expression()

        while True:
            op = self._current()
            if op.kind not in (TokenKind.OPERATOR, TokenKind.KEYWORD) or op.value not in _BINARY_PRIORITY:
                break
            left_priority, right_priority = _BINARY_PRIORITY[op.value]
            if left_priority <= limit:
                break
            op_index = self._index
            self._advance()
            right = self._expression(right_priority)
            left = BinaryOperation(first=first, last=self._previous, operator=op.value,
                                   operator_index=op_index, left=left, right=right)
        return left

    def _simple_expression(self) -> Expression:
        tok = self._current()
        first = self._index
        expr: Expression

        if tok.kind == TokenKind.NUMBER:
            self._advance()
            expr = NumberLiteral(first=first, last=first, text=tok.value)
        elif tok.is_string:
            self._advance()
            expr = StringLiteral(first=first, last=first, text=tok.value)
        elif tok.is_keyword("nil"):
            self._advance()
            expr = NilLiteral(first=first, last=first)
        elif tok.is_keyword("true", "false"):
            self._advance()
            expr = BooleanLiteral(first=first, last=first, value=tok.value == "true")
        elif tok.is_operator("..."):
            self._advance()
            expr = Vararg(first=first, last=first)
        elif tok.is_operator("{"):
            expr = self._table_constructor()
        elif tok.is_keyword("function"):
            self._advance()
            function = self._function_body()
            expr = FunctionExpression(first=first, last=self._previous, function=function)
        elif tok.is_keyword("if"):
            expr = self._if_expression()
        else:
            expr = self._suffixed_expression()

        if self._match("::"):
            self._skip_type()
            expr.last = self._previous
        return expr

    def _if_expression(self) -> IfExpression:
        first = self._index
        self._advance()
        conditions = [self._expression()]
        self._expect("then", "in if-expression")
        values = [self._expression()]
        while self._match("elseif"):
            conditions.append(self._expression())
            self._expect("then", "in if-expression")
            values.append(self._expression())
        self._expect("else", "in if-expression")
        else_value = self._expression()
        return IfExpression(first=first, last=self._previous, conditions=conditions,
                            values=values, else_value=else_value)

    def _primary_expression(self) -> Expression:
        tok = self._current()
        first = self._index
        if tok.kind == TokenKind.NAME:
            self._advance()
            return Name(first=first, last=first, name=tok.value)
        if tok.is_operator("("):
            self._advance()
            inner = self._expression()
            self._expect(")", "to close parenthesized expression")
            return Parenthesized(first=first, last=self._previous, expression=inner)
        raise self._error("Unexpected symbol")

    def _suffixed_expression(self) -> Expression:
        first = self._index
        expr = self._primary_expression()
        while True:
            tok = self._current()
            if tok.is_operator("."):
                self._advance()
                key_tok = self._expect_name("after '.'")
                key = Name(first=self._previous, last=self._previous, name=key_tok.value)
                expr = Index(first=first, last=self._previous, target=expr, key=key, style="dot")
            elif tok.is_operator("["):
                self._advance()
                key = self._expression()
                self._expect("]", "to close index")
                expr = Index(first=first, last=self._previous, target=expr, key=key, style="bracket")
            elif tok.is_operator(":"):
                self._advance()
                method = self._expect_name("after ':'").value
                args, kind, open_paren = self._call_arguments()
                expr = MethodCall(first=first, last=self._previous, target=expr, method=method,
                                  args=args, args_kind=kind, open_paren=open_paren)
            elif tok.is_operator("(", "{") or tok.is_string:
                args, kind, open_paren = self._call_arguments()
                expr = Call(first=first, last=self._previous, callee=expr, args=args,
                            args_kind=kind, open_paren=open_paren)
            else:
                return expr

    def _call_arguments(self) -> Tuple[List[Expression], str, Optional[int]]:
        tok = self._current()
        if tok.is_string:
            index = self._index
            self._advance()
            return [StringLiteral(first=index, last=index, text=tok.value)], "string", None
        if tok.is_operator("{"):
            return [self._table_constructor()], "table", None
        open_paren = self._index
        self._expect("(", "to open argument list")
        args: List[Expression] = []
        if not self._check(")"):
            args = self._expression_list()
        self._expect(")", "to close argument list")
        return args, "parens", open_paren

    def _table_constructor(self) -> TableConstructor:
        first = self._index
        self._expect("{", "to open table")
        fields: List[TableField] = []
        separators: List[int] = []
        while not self._check("}"):
            fields.append(self._table_field())
            if self._check(",") or self._check(";"):
                separators.append(self._index)
                self._advance()
            else:
                break
        self._expect("}", "to close table")
        return TableConstructor(first=first, last=self._previous, fields=fields, separators=separators)

    def _table_field(self) -> TableField:
        first = self._index
        tok = self._current()
        if tok.is_operator("["):
            self._advance()
            key = self._expression()
            self._expect("]", "to close table key")
            self._expect("=", "after table key")
            value = self._expression()
            return TableField(first=first, last=self._previous, kind="keyed", key=key, value=value)
        if tok.kind == TokenKind.NAME and self._peek().is_operator("="):
            self._advance()
            key = Name(first=first, last=first, name=tok.value)
            self._advance()
            value = self._expression()
            return TableField(first=first, last=self._previous, kind="named", key=key, value=value)
        value = self._expression()
        return TableField(first=first, last=self._previous, kind="positional", key=None, value=value)

    # =========================================================================
    # TYPES (skipped)
    # =========================================================================

    def _skip_balanced(self) -> None:
        """Skip from an opening bracket to its matching closer."""
        start = self._index
        stack: List[str] = []
        while True:
            tok = self._current()
            if tok.kind == TokenKind.EOF:
                raise self._error("Unbalanced brackets in type")
            if tok.kind == TokenKind.OPERATOR:
                if tok.value in _BRACKETS:
                    stack.append(_BRACKETS[tok.value])
                elif stack and tok.value == stack[-1]:
                    stack.pop()
            self._advance()
            if not stack:
                self.type_spans.append((start, self._previous))
                return

    def _skip_type(self) -> None:
        start = self._index
        self._skip_simple_type()
        while self._check("|") or self._check("&"):
            self._advance()
            self._skip_simple_type()
        self.type_spans.append((start, self._previous))

    def _skip_simple_type(self) -> None:
        tok = self._current()
        if tok.is_operator("<"):
            self._skip_balanced()
            tok = self._current()

        if tok.is_operator("(", "{"):
            self._skip_balanced()
            if self._match("->"):
                self._skip_type()
        elif tok.kind == TokenKind.NAME and tok.value == "typeof" and self._peek().is_operator("("):
            self._advance()
            self._skip_balanced()
        elif tok.kind == TokenKind.NAME:
            self._advance()
            while self._match("."):
                self._expect_name("in type name")
            if self._check("<"):
                self._skip_balanced()
        elif tok.is_keyword("nil", "true", "false") or tok.is_string:
            self._advance()
        elif tok.is_operator("..."):
            self._advance()
            if self._current().kind == TokenKind.NAME:
                self._skip_simple_type()
        elif tok.is_operator("?", "|", "&"):
            pass
        else:
            raise self._error("Expected type")

        while self._match("?"):
            pass


def parse_tokens(tokens: Sequence[Token]) -> Chunk:
    return Parser(tokens).parse_chunk()


def parse(source: str) -> Chunk:
    """
    Parse Lua source into a Chunk.

    Raises:
        LexError: If the source cannot be tokenized
        ParseError: If the tokens do not form a valid chunk
    """
    return parse_tokens(tokenize(source))


__all__ = ["Parser", "parse", "parse_tokens", "ParseError"]
