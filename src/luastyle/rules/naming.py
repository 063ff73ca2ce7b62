"""
Naming conventions.

    camelCase        local variables, parameters, functions, members
    PascalCase       classes, modules, enum-like tables
    LOUD_SNAKE_CASE  constants

A single leading underscore marks a private member (`_cache`), and `_` alone
is the conventional throwaway name. Metamethods (`__index`, `__call`, ...)
are defined by the language and are never checked.
"""

import re
from typing import Iterable, Iterator, Tuple

from luastyle.diagnostics import Diagnostic
from luastyle.rules.base import LintContext, Rule
from luastyle.syntax import (
    FunctionDeclaration,
    GenericFor,
    LocalAssignment,
    LocalFunction,
    Node,
    NumericFor,
    iter_functions,
    walk,
)


_CAMEL = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_PASCAL = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_LOUD_SNAKE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")


def is_conventional_name(name: str) -> bool:
    if name == "_" or name.startswith("__"):
        return True
    if name.startswith("_"):
        name = name[1:]
    return bool(_CAMEL.match(name) or _PASCAL.match(name) or _LOUD_SNAKE.match(name))


def to_camel_case(name: str) -> str:
    """`snake_case_name` -> `snakeCaseName`, keeping one leading underscore."""
    prefix = "_" if name.startswith("_") else ""
    parts = [part for part in name.split("_") if part]
    if not parts:
        return name
    head = parts[0][0].lower() + parts[0][1:]
    return prefix + head + "".join(part[0].upper() + part[1:] for part in parts[1:])


def _declared_names(root: Node) -> Iterator[Tuple[str, int]]:
    """Yield (name, token index) for every name the code declares."""
    for node in walk(root):
        if isinstance(node, LocalAssignment):
            for binding in node.names:
                yield binding.name, binding.first
        elif isinstance(node, LocalFunction):
            yield node.name.name, node.name.first
        elif isinstance(node, FunctionDeclaration):
            yield node.method or node.path[-1], node.name_index
        elif isinstance(node, NumericFor):
            yield node.variable.name, node.variable.first
        elif isinstance(node, GenericFor):
            for binding in node.variables:
                yield binding.name, binding.first
    for _, function in iter_functions(root):
        for parameter in function.parameters:
            yield parameter.name, parameter.first


class Naming(Rule):
    rule_id = "naming"
    description = (
        "Use camelCase for locals, parameters and functions, PascalCase for classes and "
        "modules, LOUD_SNAKE_CASE for constants."
    )
    layer = "syntax"
    good = "local MAX_HEALTH = 100\nlocal Players = game:GetService(\"Players\")\nlocal function getPlayerName(player)\nend\n"
    bad = "local max_health = 100\nlocal function get_player_name(player_obj)\nend\n"

    def check(self, context: LintContext) -> Iterable[Diagnostic]:
        tokens = context.chunk.tokens
        seen = set()
        for name, index in _declared_names(context.chunk.body):
            if is_conventional_name(name) or index in seen:
                continue
            seen.add(index)
            yield self.at_token(
                context, tokens[index],
                f"'{name}' is not camelCase, PascalCase or LOUD_SNAKE_CASE (try '{to_camel_case(name)}')",
            )
