"""
Term algebra for formula-jax.

Rewrites the right-hand side of a formula into an ordered list of model
terms and assembles the ``TermsTable`` that maps terms to the evaluation
terms (columns) they are built from.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .expressions import (
    Call,
    ExpressionNode,
    Formula,
    Literal,
    validate_expression,
)
from ..core.exceptions import MalformedExpressionError
from ..utils.logging import get_logger


logger = get_logger(__name__)


# Operators with formula meaning; other calls (log, exp, ...) are opaque
SPECIAL_OPERATORS = frozenset({"+", "-", "*", "/", "&", "|", "^"})

ASSOCIATIVE_OPERATORS = frozenset({"+", "*", "&"})

# Terms built from other evaluations rather than evaluated themselves
NONEVALUATION_OPERATORS = frozenset({"&", "|"})


def distribute_products(node: ExpressionNode) -> ExpressionNode:
    """
    Rewrite ``a * b`` as ``a + b + a&b``, arguments first.

    Products of more than two operands fold pairwise from the right:
    ``a*b*c`` becomes ``a + S + a&S`` with ``S`` the distributed ``b*c``.
    This is not the full expansion into every interaction subset.
    """
    if not isinstance(node, Call) or node.op not in SPECIAL_OPERATORS:
        return node

    args = tuple(distribute_products(arg) for arg in node.args)
    if node.op != "*":
        return Call(node.op, args)

    if len(args) < 2:
        raise MalformedExpressionError(node, expected="product of at least two operands")

    first = args[0]
    rest = args[1] if len(args) == 2 else distribute_products(Call("*", args[1:]))
    return Call("+", (first, rest, Call("&", (first, rest))))


def flatten(node: ExpressionNode) -> ExpressionNode:
    """Merge nested calls of the same associative operator: ``a+(b+c)`` -> ``a+b+c``."""
    if not isinstance(node, Call):
        return node

    args: List[ExpressionNode] = []
    for arg in node.args:
        arg = flatten(arg)
        if node.op in ASSOCIATIVE_OPERATORS and isinstance(arg, Call) and arg.op == node.op:
            args.extend(arg.args)
        else:
            args.append(arg)
    return Call(node.op, tuple(args))


def split_terms(node: ExpressionNode) -> Tuple[ExpressionNode, ...]:
    """Arguments of a top-level ``+`` call, otherwise the node itself."""
    if isinstance(node, Call) and node.op == "+":
        return node.args
    return (node,)


def interaction_order(term: ExpressionNode) -> int:
    """Number of operands combined by ``&``; 1 for any other term."""
    if isinstance(term, Call) and term.op == "&":
        return len(term.args)
    return 1


def evaluation_terms(term: ExpressionNode) -> List[ExpressionNode]:
    """
    Expressions that must be evaluated against the data to build ``term``.

    For ``&`` and ``|`` terms these are the additive pieces of each operand
    with numeric literals dropped, so ``(1 | g)`` needs only ``g``. Any other
    term is its own evaluation term.
    """
    if isinstance(term, Call) and term.op in NONEVALUATION_OPERATORS:
        return [
            piece
            for operand in term.args
            for piece in split_terms(operand)
            if not isinstance(piece, Literal)
        ]
    return [term]


def is_fixed_effect(term: ExpressionNode) -> bool:
    """False for grouping (``|``) terms."""
    return not (isinstance(term, Call) and term.op == "|")


def _is_literal(node: ExpressionNode, value: int) -> bool:
    return isinstance(node, Literal) and node.value == value


def _removes_intercept(term: ExpressionNode) -> bool:
    if _is_literal(term, 0) or _is_literal(term, -1):
        return True
    return (
        isinstance(term, Call)
        and term.op == "-"
        and len(term.args) == 1
        and _is_literal(term.args[0], 1)
    )


@dataclass(frozen=True)
class ExpandedTerms:
    """Result of expanding a right-hand side."""

    terms: Tuple[ExpressionNode, ...]
    order: Tuple[int, ...]
    intercept: bool


def expand(rhs: ExpressionNode) -> ExpandedTerms:
    """
    Expand a right-hand side into terms sorted by interaction order.

    Args:
        rhs: Right-hand side expression

    Returns:
        ExpandedTerms with the sorted terms, their orders and whether the
        model keeps its intercept

    Raises:
        MalformedExpressionError: If the expression tree is malformed

    Examples:
        a + b&c + b          -> terms (a, b, b&c), order (1, 1, 2)
        a * b                -> terms (a, b, a&b), order (1, 1, 2)
        0 + a                -> terms (a,), intercept False
    """
    validate_expression(rhs)

    candidates = split_terms(flatten(distribute_products(rhs)))

    terms: List[ExpressionNode] = []
    intercept = True
    for term in candidates:
        if _is_literal(term, 1):
            continue
        if _removes_intercept(term):
            intercept = False
            continue
        terms.append(term)

    orders = [interaction_order(term) for term in terms]
    permutation = sorted(range(len(terms)), key=lambda i: orders[i])

    return ExpandedTerms(
        terms=tuple(terms[i] for i in permutation),
        order=tuple(orders[i] for i in permutation),
        intercept=intercept,
    )


@dataclass(frozen=True, eq=False)
class TermsTable:
    """
    Canonical description of a model formula.

    Attributes:
        terms: Right-hand side terms in non-decreasing interaction order
        eval_terms: Unique evaluation terms; the response is first if present
        factors: int8 incidence matrix, rows = eval_terms, columns = the
            response (if present) followed by terms
        order: Interaction order of each incidence column
        response: Whether the formula has a left-hand side
        intercept: Whether the model matrix gets an intercept column
        formula: The formula the table was built from
    """

    terms: Tuple[ExpressionNode, ...]
    eval_terms: Tuple[ExpressionNode, ...]
    factors: np.ndarray
    order: Tuple[int, ...]
    response: bool
    intercept: bool
    formula: Optional[Formula] = field(default=None, repr=False)

    @classmethod
    def from_formula(cls, formula: Formula) -> "TermsTable":
        """
        Build the terms table for a formula.

        Raises:
            MalformedExpressionError: If either side is malformed
        """
        if not isinstance(formula, Formula):
            raise MalformedExpressionError(formula, expected="Formula")

        expanded = expand(formula.rhs)
        term_sets = [evaluation_terms(term) for term in expanded.terms]
        order = list(expanded.order)

        has_lhs = formula.lhs is not None
        if has_lhs:
            validate_expression(formula.lhs)
            term_sets.insert(0, [formula.lhs])
            order.insert(0, 1)

        vocabulary: List[ExpressionNode] = []
        for term_set in term_sets:
            for eval_term in term_set:
                if eval_term not in vocabulary:
                    vocabulary.append(eval_term)

        factors = np.zeros((len(vocabulary), len(term_sets)), dtype=np.int8)
        for column, term_set in enumerate(term_sets):
            for eval_term in set(term_set):
                factors[vocabulary.index(eval_term), column] = 1
        factors.setflags(write=False)

        table = cls(
            terms=expanded.terms,
            eval_terms=tuple(vocabulary),
            factors=factors,
            order=tuple(order),
            response=has_lhs,
            intercept=expanded.intercept,
            formula=formula,
        )

        logger.debug(
            "Built terms table",
            formula=formula.rhs,
            n_terms=len(table.terms),
            n_eval_terms=len(table.eval_terms),
            intercept=table.intercept,
        )
        return table

    @property
    def response_term(self) -> Optional[ExpressionNode]:
        return self.eval_terms[0] if self.response else None

    def term_column(self, index: int) -> int:
        """Incidence column of ``terms[index]`` (0-based)."""
        return index + int(self.response)

    def fixed_effect_terms(self) -> List[Tuple[int, ExpressionNode]]:
        """(incidence column, term) pairs for the non-grouping terms, in order."""
        return [
            (self.term_column(i), term)
            for i, term in enumerate(self.terms)
            if is_fixed_effect(term)
        ]

    def term_eval_terms(self, column: int) -> List[ExpressionNode]:
        """Evaluation terms of an incidence column, in vocabulary order."""
        return [self.eval_terms[i] for i in np.flatnonzero(self.factors[:, column])]

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation for reporting or serialization."""
        return {
            "terms": [str(term) for term in self.terms],
            "eval_terms": [str(term) for term in self.eval_terms],
            "factors": self.factors.tolist(),
            "order": list(self.order),
            "response": self.response,
            "intercept": self.intercept,
        }


def build_terms(formula: Formula) -> TermsTable:
    """
    Convenience function to build a ``TermsTable``.

    Args:
        formula: Formula object

    Returns:
        TermsTable for the formula
    """
    return TermsTable.from_formula(formula)
