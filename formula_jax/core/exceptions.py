"""
Exception classes for formula-jax.

Provides rich error information with actionable suggestions and documentation links.
"""

from typing import List, Optional, Dict, Any


class FormulaJaxError(Exception):
    """
    Base exception class for formula-jax with rich error information.

    Provides structured error information including suggestions for resolution
    and links to relevant documentation.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        documentation_link: Optional[str] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.suggestions = suggestions or []
        self.documentation_link = documentation_link
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        if self.documentation_link:
            message += f"\n\nDocumentation: {self.documentation_link}"

        return message


class DataFormatError(FormulaJaxError):
    """Exception raised when the data table cannot support the formula."""

    def __init__(
        self,
        specific_issue: Optional[str] = None,
        missing_columns: Optional[List[str]] = None,
        available_columns: Optional[List[str]] = None,
        **kwargs
    ):
        if missing_columns:
            message = f"Columns not found in data: {missing_columns}"
            suggestions = [
                "Check column name spelling and case sensitivity",
                "Ensure every variable in the formula exists in the data",
            ]
            if available_columns is not None:
                suggestions.insert(0, f"Available columns: {', '.join(map(str, available_columns))}")
        elif specific_issue:
            message = f"Data format issue: {specific_issue}"
            suggestions = [
                "Check your data structure and column types",
                "Numeric terms need numeric columns of the table's length",
                "Pass a pandas DataFrame as the data table",
            ]
        else:
            message = "Data format validation failed"
            suggestions = [
                "Check the data format documentation",
                "Validate your input data structure",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            documentation_link="https://docs.formula-jax.org/data",
            error_code=kwargs.pop('error_code', "DATA_FORMAT"),
            context={
                "specific_issue": specific_issue,
                "missing_columns": missing_columns,
                "available_columns": available_columns,
            },
            **kwargs
        )


class ModelSpecificationError(FormulaJaxError):
    """Exception raised for model specification issues."""

    def __init__(
        self,
        formula: Optional[str] = None,
        term: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        if term and reason:
            message = f"Invalid term '{term}': {reason}"
        elif formula and reason:
            message = f"Invalid formula specification '{formula}': {reason}"
        elif formula:
            message = f"Invalid formula specification: {formula}"
        else:
            message = "Model specification error"

        suggestions = kwargs.pop('suggestions', None) or [
            "Check formula syntax (e.g. 'a + b', 'a * b', 'a & b')",
            "Ensure all terms reference existing columns",
            "Use 0 or -1 to drop the intercept",
        ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            documentation_link=kwargs.pop('documentation_link', "https://docs.formula-jax.org/formulas"),
            error_code=kwargs.pop('error_code', "MODEL_SPEC"),
            context={"formula": formula, "term": term, "reason": reason},
            **kwargs
        )


class MalformedExpressionError(ModelSpecificationError):
    """Exception raised when an expression node is not the kind required."""

    def __init__(self, expression: Any = None, expected: str = "call expression", **kwargs):
        self.expression = expression
        super().__init__(
            term=repr(expression),
            reason=f"expected a {expected}, found {type(expression).__name__}",
            suggestions=[
                "Build expressions only from Symbol, Call and Literal nodes",
                "Call operators must be non-empty strings",
                "Products need at least two operands, e.g. Call('*', (a, b))",
            ],
            error_code="MALFORMED_EXPRESSION",
            **kwargs
        )


class UnsupportedInteractionOrderError(ModelSpecificationError):
    """Exception raised for three-way and higher interactions in the model matrix."""

    def __init__(self, term: Optional[str] = None, order: Optional[int] = None, **kwargs):
        self.order = order
        super().__init__(
            term=term,
            reason=f"interactions of {order} evaluation terms are not supported",
            suggestions=[
                "Model matrices support main effects and two-way interactions",
                "Split the interaction into pairwise terms",
            ],
            error_code="INTERACTION_ORDER",
            **kwargs
        )


class MissingResponseError(ModelSpecificationError):
    """Exception raised when a response is requested from a one-sided formula."""

    def __init__(self, formula: Optional[str] = None, **kwargs):
        super().__init__(
            formula=formula,
            reason="model formula is one-sided",
            suggestions=[
                "Add a left-hand side, e.g. 'y ~ a + b'",
                "Only request the response for two-sided formulas",
            ],
            error_code="MISSING_RESPONSE",
            **kwargs
        )


class ContrastError(FormulaJaxError):
    """Exception raised for contrast coding issues."""

    def __init__(
        self,
        n_levels: Optional[int] = None,
        base: Optional[int] = None,
        reason: Optional[str] = None,
        column: Optional[str] = None,
        **kwargs
    ):
        message = f"Cannot build contrasts: {reason}" if reason else "Contrast coding failed"
        if column:
            message += f" (column '{column}')"

        suggestions = kwargs.pop('suggestions', None) or [
            "Check the number of observed levels of the categorical column",
            "Check the base level index",
        ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            documentation_link="https://docs.formula-jax.org/contrasts",
            error_code=kwargs.pop('error_code', "CONTRAST"),
            context={"n_levels": n_levels, "base": base, "column": column},
            **kwargs
        )


class InsufficientLevelsError(ContrastError):
    """Exception raised when fewer than two levels are available for contrasts."""

    def __init__(self, n_levels: Optional[int] = None, **kwargs):
        super().__init__(
            n_levels=n_levels,
            reason=f"not enough degrees of freedom to define contrasts ({n_levels} level(s))",
            suggestions=[
                "Contrasts need at least two observed levels",
                "Rows dropped for missing values may have removed levels",
                "Remove constant categorical terms from the formula",
            ],
            error_code="INSUFFICIENT_LEVELS",
            **kwargs
        )


class InvalidBaseError(ContrastError):
    """Exception raised when the base level lies outside 1..k."""

    def __init__(self, n_levels: Optional[int] = None, base: Optional[int] = None, **kwargs):
        super().__init__(
            n_levels=n_levels,
            base=base,
            reason=f"base = {base} is not allowed for n = {n_levels}",
            suggestions=[
                f"Use a 1-based base level between 1 and {n_levels}",
                "Check the contrasts.base configuration value",
            ],
            error_code="INVALID_BASE",
            **kwargs
        )


class ConfigurationError(FormulaJaxError):
    """Exception raised for configuration issues."""

    def __init__(self, config_key: Optional[str] = None, **kwargs):
        if config_key:
            message = f"Invalid configuration for '{config_key}'"
            suggestions = [
                f"Check the value for configuration key '{config_key}'",
                "Review configuration file syntax",
                "Check environment variable formatting",
                "Use formula_jax.get_config() to inspect current settings",
            ]
        else:
            message = "Configuration error"
            suggestions = [
                "Check configuration file syntax",
                "Review configuration documentation",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            documentation_link="https://docs.formula-jax.org/configuration",
            error_code="CONFIG",
            context={"config_key": config_key},
            **kwargs
        )
