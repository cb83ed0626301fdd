"""
Evaluation of composite evaluation terms such as ``log(c)`` or ``I(x^2)``.

Plain symbols are looked up by the frame builder; everything else is handed
to an evaluator. ``ExpressionEvaluator`` is the default one and understands
arithmetic plus a registry of numpy functions.
"""

from functools import reduce
from typing import Callable, Dict, Optional, Union

import numpy as np
import pandas as pd

from .expressions import Call, ExpressionNode, Literal, Symbol
from ..core.exceptions import DataFormatError, MalformedExpressionError, ModelSpecificationError
from ..utils.logging import get_logger
from ..utils.validation import as_float_column


DEFAULT_FUNCTIONS: Dict[str, Callable] = {
    "I": lambda x: x,
    "log": np.log,
    "log2": np.log2,
    "log10": np.log10,
    "exp": np.exp,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
}

ARITHMETIC_OPERATORS: Dict[str, Callable] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.true_divide,
    "^": np.power,
}


class ExpressionEvaluator:
    """
    Evaluates an expression node against a DataFrame into a float vector.

    Examples:
        evaluator = ExpressionEvaluator()
        evaluator.register("logit", lambda p: np.log(p / (1 - p)))
        values = evaluator(call("log", "c"), data)
    """

    def __init__(self, functions: Optional[Dict[str, Callable]] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.functions = dict(DEFAULT_FUNCTIONS)
        if functions:
            self.functions.update(functions)

    def register(self, name: str, func: Callable) -> None:
        """Make ``func`` callable from formulas as ``name(...)``."""
        self.functions[name] = func

    def __call__(self, node: ExpressionNode, data: pd.DataFrame) -> np.ndarray:
        with np.errstate(all="ignore"):
            result = np.asarray(self.evaluate(node, data), dtype=np.float64)

        if result.ndim == 0:
            result = np.full(len(data), float(result))
        elif result.shape != (len(data),):
            raise DataFormatError(
                specific_issue=(
                    f"'{node}' evaluated to shape {result.shape}, expected ({len(data)},)"
                )
            )

        n_bad = int(np.sum(np.isinf(result)))
        if n_bad:
            self.logger.warning(f"'{node}' produced infinite values", count=n_bad)
        return result

    def evaluate(self, node: ExpressionNode, data: pd.DataFrame) -> Union[float, np.ndarray]:
        """Recursively evaluate ``node``; scalars stay scalars."""
        if isinstance(node, Literal):
            return float(node.value)

        if isinstance(node, Symbol):
            if node.name not in data.columns:
                raise DataFormatError(
                    missing_columns=[node.name], available_columns=list(data.columns)
                )
            return as_float_column(data[node.name], name=node.name)

        if not isinstance(node, Call):
            raise MalformedExpressionError(node, expected="expression node")

        values = [self.evaluate(arg, data) for arg in node.args]

        if node.op in ARITHMETIC_OPERATORS:
            if len(values) == 1 and node.op in ("+", "-"):
                return np.negative(values[0]) if node.op == "-" else values[0]
            if len(values) < 2:
                raise ModelSpecificationError(
                    term=str(node), reason=f"operator '{node.op}' needs two operands"
                )
            return reduce(ARITHMETIC_OPERATORS[node.op], values)

        func = self.functions.get(node.op)
        if func is None:
            raise ModelSpecificationError(
                term=str(node),
                reason=f"unknown function '{node.op}'",
                suggestions=[
                    f"Known functions: {', '.join(sorted(self.functions))}",
                    "Register new functions with ExpressionEvaluator.register()",
                ],
            )
        return func(*values)
