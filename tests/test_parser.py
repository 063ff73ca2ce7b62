"""
Tests for the parser (tokens → syntax tree).

These tests verify:
    - Statement and expression node types
    - Operator precedence and associativity
    - Luau extensions (types skipped, compound assignment, if-expressions)
    - Node first/last token indices
    - ParseError messages and positions
"""

import pytest

from luastyle.errors import ParseError
from luastyle.parser import parse
from luastyle.syntax import (
    Assignment,
    BinaryOperation,
    Block,
    CallStatement,
    CompoundAssignment,
    Continue,
    FunctionDeclaration,
    FunctionExpression,
    GenericFor,
    If,
    IfExpression,
    Index,
    LocalAssignment,
    LocalFunction,
    MethodCall,
    Name,
    NumberLiteral,
    NumericFor,
    Parenthesized,
    Repeat,
    Return,
    StringLiteral,
    TableConstructor,
    TypeAlias,
    UnaryOperation,
    While,
    iter_functions,
    walk,
)


def first_statement(source):
    return parse(source).body.statements[0]


def local_value(source):
    return first_statement(source).values[0]


class TestStatements:
    """Test statement node types."""

    def test_local_assignment(self):
        stmt = first_statement("local x = 1")
        assert isinstance(stmt, LocalAssignment)
        assert [n.name for n in stmt.names] == ["x"]
        assert isinstance(stmt.values[0], NumberLiteral)
        assert stmt.values[0].text == "1"

    def test_local_without_value(self):
        stmt = first_statement("local a, b")
        assert [n.name for n in stmt.names] == ["a", "b"]
        assert stmt.values == []

    def test_assignment_to_fields(self):
        stmt = first_statement("t.x, t[1] = 1, 2")
        assert isinstance(stmt, Assignment)
        assert [target.style for target in stmt.targets] == ["dot", "bracket"]

    def test_call_statements(self):
        chunk = parse('print("a")\nobj:method(1)\nrequire "mod"\nsetup { debug = true }\n')
        calls = [s.call for s in chunk.body.statements]
        assert all(isinstance(s, CallStatement) for s in chunk.body.statements)
        assert calls[0].args_kind == "parens"
        assert isinstance(calls[1], MethodCall)
        assert calls[1].method == "method"
        assert calls[2].args_kind == "string"
        assert calls[3].args_kind == "table"

    def test_function_declaration_path(self):
        stmt = first_statement("function M.sub:method(a, b) end")
        assert isinstance(stmt, FunctionDeclaration)
        assert stmt.path == ["M", "sub"]
        assert stmt.method == "method"
        assert [p.name for p in stmt.function.parameters] == ["a", "b"]

    def test_local_function(self):
        stmt = first_statement("local function f(...) return ... end")
        assert isinstance(stmt, LocalFunction)
        assert stmt.name.name == "f"
        assert stmt.function.is_vararg
        assert isinstance(stmt.function.body.statements[0], Return)

    def test_if_elseif_else(self):
        stmt = first_statement("if a then x() elseif b then y() else z() end")
        assert isinstance(stmt, If)
        assert len(stmt.clauses) == 2
        assert stmt.else_body is not None
        assert len(stmt.else_body.statements) == 1

    def test_loops(self):
        chunk = parse(
            "for i = 1, 10, 2 do end\n"
            "for k, v in pairs(t) do end\n"
            "while x do end\n"
            "repeat x() until done\n"
        )
        numeric, generic, loop, repeat = chunk.body.statements
        assert isinstance(numeric, NumericFor)
        assert numeric.step is not None
        assert isinstance(generic, GenericFor)
        assert [v.name for v in generic.variables] == ["k", "v"]
        assert isinstance(loop, While)
        assert isinstance(repeat, Repeat)

    def test_return_must_be_last(self):
        with pytest.raises(ParseError) as exc:
            parse("return 1 x = 2")
        assert "Expected end of file" in exc.value.message


class TestExpressions:
    """Test precedence, associativity and literal nodes."""

    def test_multiplication_binds_tighter(self):
        expr = local_value("local x = 1 + 2 * 3")
        assert isinstance(expr, BinaryOperation)
        assert expr.operator == "+"
        assert expr.right.operator == "*"

    def test_concatenation_is_right_associative(self):
        expr = local_value("local s = a .. b .. c")
        assert expr.operator == ".."
        assert isinstance(expr.left, Name)
        assert isinstance(expr.right, BinaryOperation)

    def test_power_binds_tighter_than_unary(self):
        expr = local_value("local x = -y ^ 2")
        assert isinstance(expr, UnaryOperation)
        assert isinstance(expr.operand, BinaryOperation)
        assert expr.operand.operator == "^"

    def test_not_binds_tighter_than_comparison(self):
        expr = local_value("local x = not a == b")
        assert expr.operator == "=="
        assert isinstance(expr.left, UnaryOperation)

    def test_operator_index_points_at_operator(self):
        chunk = parse("local x = a + b")
        expr = chunk.body.statements[0].values[0]
        assert chunk.tokens[expr.operator_index].value == "+"

    def test_parenthesized(self):
        expr = local_value("local x = (a)")
        assert isinstance(expr, Parenthesized)

    def test_table_fields(self):
        table = local_value("local t = { 1, x = 2, [k] = 3 }")
        assert isinstance(table, TableConstructor)
        assert [f.kind for f in table.fields] == ["positional", "named", "keyed"]
        assert len(table.separators) == 2

    def test_trailing_separator_recorded(self):
        table = local_value("local t = { 1, }")
        assert len(table.fields) == 1
        assert len(table.separators) == 1

    def test_function_expression(self):
        assert isinstance(local_value("local f = function() end"), FunctionExpression)

    def test_index_chain(self):
        expr = local_value("local v = a.b[c].d")
        assert isinstance(expr, Index)
        assert expr.style == "dot"
        assert isinstance(expr.target, Index)


class TestLuau:
    """Test the Luau syntax used in the style guide."""

    def test_typed_local(self):
        chunk = parse("local x: number = 5")
        assert isinstance(chunk.body.statements[0], LocalAssignment)
        # local(0) x(1) :(2) number(3)
        assert (3, 3) in chunk.type_spans

    def test_type_alias(self):
        stmt = first_statement("type Point = { x: number, y: number }")
        assert isinstance(stmt, TypeAlias)
        assert stmt.name == "Point"
        assert not stmt.exported

    def test_export_type(self):
        stmt = first_statement("export type Id = string | number")
        assert isinstance(stmt, TypeAlias)
        assert stmt.exported

    def test_generic_function_with_types(self):
        stmt = first_statement("local function first<T>(list: { T }, fallback: T?): T\n\treturn list[1] or fallback\nend")
        assert isinstance(stmt, LocalFunction)
        assert [p.name for p in stmt.function.parameters] == ["list", "fallback"]

    def test_function_type_annotation(self):
        stmt = first_statement("local cb: (number, string) -> boolean = nil")
        assert [n.name for n in stmt.names] == ["cb"]

    def test_compound_assignment(self):
        stmt = first_statement("count += 1")
        assert isinstance(stmt, CompoundAssignment)
        assert stmt.operator == "+="

    def test_if_expression(self):
        expr = local_value("local y = if ready then 1 elseif waiting then 2 else 3")
        assert isinstance(expr, IfExpression)
        assert len(expr.conditions) == 2

    def test_continue(self):
        loop = first_statement("for _, v in items do if v then continue end end")
        inner_if = loop.body.statements[0]
        assert isinstance(inner_if.clauses[0].body.statements[0], Continue)

    def test_type_cast(self):
        expr = local_value("local n = value :: number")
        assert isinstance(expr, Name)

    def test_const_attribute(self):
        stmt = first_statement("local LIMIT <const> = 10")
        assert [n.name for n in stmt.names] == ["LIMIT"]

    def test_type_named_variable_still_works(self):
        """`type` is only an alias keyword when a name follows it."""
        stmt = first_statement("type(x)")
        assert isinstance(stmt, CallStatement)


class TestTokenIndices:
    """Test that node indices refer to the full token list."""

    def test_comments_are_counted(self):
        chunk = parse("local x = 1 -- note\nlocal y = 2")
        second = chunk.body.statements[1]
        # local(0) x(1) =(2) 1(3) comment(4) local(5)
        assert second.first == 5
        assert chunk.tokens[second.last].value == "2"

    def test_walk_is_preorder(self):
        chunk = parse("local x = a + b")
        nodes = list(walk(chunk.body))
        assert isinstance(nodes[0], Block)
        assert isinstance(nodes[1], LocalAssignment)

    def test_iter_functions(self):
        chunk = parse("local function a() end\nfunction b() return function() end end")
        owners = [type(owner).__name__ for owner, _ in iter_functions(chunk.body)]
        assert owners == ["LocalFunction", "FunctionDeclaration", "FunctionExpression"]


class TestErrors:
    """Test ParseError messages and positions."""

    def test_missing_end(self):
        with pytest.raises(ParseError) as exc:
            parse("if x then\n\ty()\n")
        assert "Expected 'end'" in exc.value.message
        assert "end of file" in exc.value.message

    def test_missing_name(self):
        with pytest.raises(ParseError) as exc:
            parse("local = 1")
        assert exc.value.message == "Expected name after 'local', found '='"
        assert (exc.value.line, exc.value.column) == (1, 7)

    def test_expression_is_not_statement(self):
        with pytest.raises(ParseError):
            parse("x")

    def test_cannot_assign_to_call(self):
        with pytest.raises(ParseError) as exc:
            parse("f() = 1")
        assert "Cannot assign" in exc.value.message

    def test_string_literal_statement(self):
        with pytest.raises(ParseError) as exc:
            parse('"text"')
        assert "Unexpected symbol" in exc.value.message


def test_string_literal_keeps_quotes():
    expr = local_value("local s = 'hi'")
    assert isinstance(expr, StringLiteral)
    assert expr.text == "'hi'"
