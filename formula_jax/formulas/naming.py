"""Coefficient labels aligned with model matrix columns."""

from typing import List, Optional

from .frame import ModelFrame
from ..config.settings import get_default_config
from ..core.exceptions import ModelSpecificationError


def coefficient_names(frame: ModelFrame, base: Optional[int] = None) -> List[str]:
    """
    Labels for the columns of the frame's model matrix.

    Numeric terms get their own name; categorical terms get one
    ``"<term> - <level>"`` label per retained non-base level.

    Args:
        frame: ModelFrame
        base: 1-based base level, defaults to the configured contrast base

    Raises:
        ModelSpecificationError: For terms built from several evaluation
            terms, which have no labelling scheme
    """
    base = base if base is not None else get_default_config().contrasts.base
    terms = frame.terms

    names = ["(Intercept)"] if terms.intercept else []
    for column, term in terms.fixed_effect_terms():
        eval_terms = terms.term_eval_terms(column)
        if len(eval_terms) != 1:
            raise ModelSpecificationError(
                term=str(term),
                reason="coefficient names are only defined for single-variable terms",
                suggestions=[
                    "Use matrix column indices with the assign vector for interactions",
                ],
            )

        if frame.is_categorical(eval_terms[0]):
            levels = frame.levels(eval_terms[0])
            names.extend(
                f"{term} - {level}"
                for position, level in enumerate(levels, 1)
                if position != base
            )
        else:
            names.append(str(term))

    return names
