"""
Expression nodes for formula-jax.

A formula side is a small immutable tree built by a front-end parser:
``Symbol`` for variable names, ``Call`` for operators and functions, and
``Literal`` for numbers. ``y ~ a + b&c + log(d)`` arrives as::

    Formula(
        lhs=Symbol("y"),
        rhs=Call("+", (Symbol("a"), Call("&", (Symbol("b"), Symbol("c"))),
                       Call("log", (Symbol("d"),)))),
    )
"""

from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Optional, Tuple, Union

from ..core.exceptions import MalformedExpressionError


@dataclass(frozen=True)
class Symbol:
    """A variable reference."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    """A numeric constant."""

    value: Union[int, float]

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Call:
    """An operator or function applied to an ordered tuple of arguments."""

    op: str
    args: Tuple["ExpressionNode", ...] = ()

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def __str__(self) -> str:
        return _render(self)


ExpressionNode = Union[Symbol, Call, Literal]

NODE_TYPES = (Symbol, Call, Literal)


@dataclass(frozen=True)
class Formula:
    """A model formula ``lhs ~ rhs``; ``lhs`` is None for one-sided formulas."""

    lhs: Optional[ExpressionNode]
    rhs: ExpressionNode

    @property
    def one_sided(self) -> bool:
        return self.lhs is None

    def __str__(self) -> str:
        return f"Formula: {'' if self.lhs is None else self.lhs} ~ {self.rhs}"


# Rendering

_PRECEDENCE = {"|": 1, "+": 2, "-": 2, "*": 3, "/": 3, "&": 4, "^": 5}
_TIGHT_OPERATORS = frozenset({"&", "^"})
_CHAINABLE_OPERATORS = frozenset({"+", "*", "&", "|"})


def _is_infix(node: Any) -> bool:
    return isinstance(node, Call) and node.op in _PRECEDENCE and len(node.args) >= 2


def _render(node: Any) -> str:
    if not isinstance(node, Call):
        return str(node)

    if _is_infix(node):
        precedence = _PRECEDENCE[node.op]
        parts = []
        for position, arg in enumerate(node.args):
            text = _render(arg)
            if _is_infix(arg):
                child = _PRECEDENCE[arg.op]
                same_level_needs_parens = position > 0 and not (
                    arg.op == node.op and node.op in _CHAINABLE_OPERATORS
                )
                if child < precedence or (child == precedence and (
                        same_level_needs_parens or node.op == "^")):
                    text = f"({text})"
            parts.append(text)
        separator = node.op if node.op in _TIGHT_OPERATORS else f" {node.op} "
        return separator.join(parts)

    if node.op in ("-", "+") and len(node.args) == 1:
        operand = node.args[0]
        text = _render(operand)
        return f"{node.op}({text})" if _is_infix(operand) else f"{node.op}{text}"

    return f"{node.op}({', '.join(_render(arg) for arg in node.args)})"


# Construction helpers

def as_node(value: Any) -> ExpressionNode:
    """
    Coerce a value into an expression node.

    Strings become symbols, numbers become literals and nodes pass through.

    Raises:
        MalformedExpressionError: If the value cannot be represented
    """
    if isinstance(value, NODE_TYPES):
        return value
    if isinstance(value, str):
        return Symbol(value)
    if isinstance(value, Real) and not isinstance(value, bool):
        return Literal(value)
    raise MalformedExpressionError(value, expected="symbol, number or expression node")


def call(op: str, *args: Any) -> Call:
    """Build a ``Call`` node, coercing arguments with ``as_node``."""
    return Call(op, tuple(as_node(arg) for arg in args))


def formula(lhs: Any, rhs: Any) -> Formula:
    """Build a ``Formula``; pass ``None`` as ``lhs`` for a one-sided formula."""
    return Formula(None if lhs is None else as_node(lhs), as_node(rhs))


# Validation and traversal

def validate_expression(node: Any) -> None:
    """
    Check that ``node`` is a well-formed expression tree.

    Raises:
        MalformedExpressionError: On the first offending node
    """
    if isinstance(node, Symbol):
        if not isinstance(node.name, str) or not node.name:
            raise MalformedExpressionError(node, expected="symbol with a non-empty name")
    elif isinstance(node, Literal):
        if not isinstance(node.value, Real) or isinstance(node.value, bool):
            raise MalformedExpressionError(node, expected="numeric literal")
    elif isinstance(node, Call):
        if not isinstance(node.op, str) or not node.op:
            raise MalformedExpressionError(node, expected="call with a non-empty operator")
        if node.op == "*" and len(node.args) < 2:
            raise MalformedExpressionError(node, expected="product of at least two operands")
        for arg in node.args:
            validate_expression(arg)
    else:
        raise MalformedExpressionError(node)


def all_vars(node: Union[ExpressionNode, Formula]) -> List[Symbol]:
    """
    Return the unique symbols referenced by an expression or formula.

    For a formula the right-hand side symbols come first, followed by any
    left-hand side symbols not already seen.
    """
    if isinstance(node, Formula):
        found = all_vars(node.rhs)
        if node.lhs is not None:
            found.extend(s for s in all_vars(node.lhs) if s not in found)
        return found

    if isinstance(node, Symbol):
        return [node]
    if isinstance(node, Literal):
        return []
    if not isinstance(node, Call):
        raise MalformedExpressionError(node)

    found: List[Symbol] = []
    for arg in node.args:
        for symbol in all_vars(arg):
            if symbol not in found:
                found.append(symbol)
    return found
