"""
Syntax Tree Objects

Defines the node types produced by the parser.

These are pure data classes representing:
    - Expressions (names, literals, calls, tables, operators)
    - Statements (assignments, control flow, declarations)
    - Blocks and the root Chunk

Every node carries `first` and `last`: indices into the chunk's full token
list (comments included) of the first and last token the node covers.
Style rules use them to look at exact source positions and at the raw
whitespace between tokens.

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about style rules
        - Never evaluate anything
        - Represent structure only
"""

from dataclasses import dataclass, field, fields
from typing import Iterator, List, Optional, Tuple

from luastyle.tokens import Token


@dataclass
class Node:
    """Base class for all syntax tree nodes."""

    first: int
    last: int


# =============================================================================
# EXPRESSIONS
# =============================================================================


@dataclass
class Expression(Node):
    pass


@dataclass
class Name(Expression):
    name: str


@dataclass
class NilLiteral(Expression):
    pass


@dataclass
class BooleanLiteral(Expression):
    value: bool


@dataclass
class NumberLiteral(Expression):
    text: str


@dataclass
class StringLiteral(Expression):
    """
    A string literal.

    `text` keeps the quotes or long brackets exactly as written, so
    quote-style checks can see which delimiter was used.
    """

    text: str


@dataclass
class Vararg(Expression):
    pass


@dataclass
class Parameter(Node):
    """A named function parameter or a local binding (`local x: T`)."""

    name: str


@dataclass
class Block(Node):
    """
    A sequence of statements.

    An empty block has `last == first - 1`.
    """

    statements: List["Statement"] = field(default_factory=list)


@dataclass
class FunctionBody(Node):
    """
    Parameter list plus body shared by every kind of function.

    Properties:
        parameters: Named parameters in declaration order
        is_vararg: True when the list ends with `...`
        open_paren: Token index of the `(` opening the parameter list
        body: Statements between the parameter list and `end`
    """

    parameters: List[Parameter]
    is_vararg: bool
    open_paren: int
    body: Block


@dataclass
class FunctionExpression(Expression):
    function: FunctionBody


@dataclass
class TableField(Node):
    """
    One entry of a table constructor.

    kind is one of:
        "positional"  { value }
        "named"       { name = value }
        "keyed"       { [key] = value }
    """

    kind: str
    key: Optional[Expression]
    value: Expression


@dataclass
class TableConstructor(Expression):
    """
    Properties:
        fields: Entries in source order
        separators: Token indices of every `,` / `;` in the constructor,
            including a trailing one
    """

    fields: List[TableField] = field(default_factory=list)
    separators: List[int] = field(default_factory=list)


@dataclass
class BinaryOperation(Expression):
    operator: str
    operator_index: int
    left: Expression
    right: Expression


@dataclass
class UnaryOperation(Expression):
    operator: str
    operator_index: int
    operand: Expression


@dataclass
class Parenthesized(Expression):
    expression: Expression


@dataclass
class Index(Expression):
    """`target.key` (style "dot") or `target[key]` (style "bracket")."""

    target: Expression
    key: Expression
    style: str


@dataclass
class Call(Expression):
    """
    A function call.

    args_kind is "parens", "string" (`f "x"`) or "table" (`f { ... }`).
    open_paren is the token index of `(`, or None for the sugared forms.
    """

    callee: Expression
    args: List[Expression]
    args_kind: str
    open_paren: Optional[int] = None


@dataclass
class MethodCall(Expression):
    target: Expression
    method: str
    args: List[Expression]
    args_kind: str
    open_paren: Optional[int] = None


@dataclass
class IfExpression(Expression):
    """Luau `if c then a elseif d then b else e`."""

    conditions: List[Expression]
    values: List[Expression]
    else_value: Expression


# =============================================================================
# STATEMENTS
# =============================================================================


@dataclass
class Statement(Node):
    pass


@dataclass
class EmptyStatement(Statement):
    pass


@dataclass
class LocalAssignment(Statement):
    names: List[Parameter]
    values: List[Expression] = field(default_factory=list)


@dataclass
class Assignment(Statement):
    targets: List[Expression]
    values: List[Expression]


@dataclass
class CompoundAssignment(Statement):
    target: Expression
    operator: str
    value: Expression


@dataclass
class CallStatement(Statement):
    call: Expression


@dataclass
class Do(Statement):
    body: Block


@dataclass
class While(Statement):
    condition: Expression
    body: Block


@dataclass
class Repeat(Statement):
    body: Block
    condition: Expression


@dataclass
class IfClause(Node):
    """An `if` or `elseif` branch. `keyword` is the token index of it."""

    keyword: int
    condition: Expression
    body: Block


@dataclass
class If(Statement):
    clauses: List[IfClause]
    else_body: Optional[Block] = None


@dataclass
class NumericFor(Statement):
    variable: Parameter
    start: Expression
    stop: Expression
    step: Optional[Expression]
    body: Block


@dataclass
class GenericFor(Statement):
    variables: List[Parameter]
    iterators: List[Expression]
    body: Block


@dataclass
class FunctionDeclaration(Statement):
    """
    `function a.b.c:d() end`

    Properties:
        path: Dotted name parts (["a", "b", "c"])
        method: Method name after `:` or None
        name_index: Token index of the last name part
    """

    path: List[str]
    method: Optional[str]
    name_index: int
    function: FunctionBody


@dataclass
class LocalFunction(Statement):
    name: Parameter
    function: FunctionBody


@dataclass
class Return(Statement):
    values: List[Expression] = field(default_factory=list)


@dataclass
class Break(Statement):
    pass


@dataclass
class Continue(Statement):
    pass


@dataclass
class TypeAlias(Statement):
    """Luau `type Name = ...` / `export type Name = ...` (not parsed further)."""

    name: str
    exported: bool = False


@dataclass
class Chunk:
    """
    Root of a parsed file.

    Properties:
        body: Top-level block
        tokens: Full token list, comments included, ending with EOF
        type_spans: (first, last) token index ranges of skipped type annotations
    """

    body: Block
    tokens: List[Token]
    type_spans: List[Tuple[int, int]] = field(default_factory=list)


# =============================================================================
# TRAVERSAL
# =============================================================================


def _children(node: Node) -> Iterator[Node]:
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and all of its descendants, depth-first, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(_children(current))))


def iter_functions(node: Node) -> Iterator[Tuple[Node, FunctionBody]]:
    """
    Yield (owner, function_body) for every function under `node`.

    owner is the FunctionDeclaration, LocalFunction or FunctionExpression
    that holds the body.
    """
    for child in walk(node):
        if isinstance(child, (FunctionDeclaration, LocalFunction, FunctionExpression)):
            yield child, child.function
