"""
Tests for model frame construction.
"""

import numpy as np
import pandas as pd
import pytest

import formula_jax
from formula_jax.core.exceptions import DataFormatError, MissingResponseError
from formula_jax.formulas.expressions import Symbol, call, formula
from formula_jax.formulas.frame import (
    ModelFrameBuilder,
    drop_unused_levels,
    model_frame,
    model_response,
    na_omit,
)
from formula_jax.formulas.terms import build_terms


class TestNaOmit:
    """Test complete-case filtering."""

    def test_rows_with_any_missing_value_dropped(self):
        df = pd.DataFrame({"a": [1.0, np.nan, 3.0], "b": ["x", "y", None]})
        kept, mask = na_omit(df)
        np.testing.assert_array_equal(mask, [True, False, False])
        assert list(kept["a"]) == [1.0]
        assert mask.dtype == bool

    def test_complete_table_untouched(self):
        df = pd.DataFrame({"a": [1.0, 2.0]})
        kept, mask = na_omit(df)
        assert mask.all()
        pd.testing.assert_frame_equal(kept, df)


class TestDropUnusedLevels:
    """Test pruning of categorical levels."""

    def test_unused_levels_removed_in_order(self):
        values = pd.Series(pd.Categorical(["c", "a", "c"], categories=["a", "b", "c"]))
        pruned = drop_unused_levels(values)
        assert list(pruned.cat.categories) == ["a", "c"]
        np.testing.assert_array_equal(pruned.cat.codes, [1, 0, 1])
        assert list(values.cat.categories) == ["a", "b", "c"]

    def test_non_categorical_passthrough(self):
        values = pd.Series([1.0, 2.0])
        assert drop_unused_levels(values) is values


class TestModelFrameBuilder:
    """Test building model frames from formulas and data."""

    def test_columns_follow_eval_terms(self, y_a_b_data, y_a_plus_b):
        frame = model_frame(y_a_plus_b, y_a_b_data)
        assert list(frame.data.columns) == ["y", "a", "b"]
        assert frame.n_rows == 4
        assert frame.retained_mask.all()
        assert frame.is_categorical(Symbol("b"))
        assert not frame.is_categorical(Symbol("a"))
        assert frame.levels(Symbol("b")) == ["p", "q"]

    def test_accepts_terms_table(self, y_a_b_data, y_a_plus_b):
        terms = build_terms(y_a_plus_b)
        frame = model_frame(terms, y_a_b_data)
        assert frame.terms is terms

    def test_missing_values_dropped(self, grouped_data):
        frame = model_frame(formula(None, "g"), grouped_data)
        np.testing.assert_array_equal(
            frame.retained_mask, [True, True, False, True, True, True]
        )
        assert frame.n_rows == 5
        assert frame.levels(Symbol("g")) == ["u", "v", "w"]

    def test_unused_levels_pruned_after_dropping_rows(self, grouped_data):
        grouped_data.loc[3, "y"] = np.nan
        frame = model_frame(formula("y", "g"), grouped_data)
        assert frame.levels(Symbol("g")) == ["u", "v"]
        assert list(grouped_data["g"].cat.categories) == ["u", "v", "w"]

    def test_level_pruning_can_be_disabled(self, grouped_data):
        grouped_data.loc[3, "y"] = np.nan
        formula_jax.configure(**{"frame.drop_unused_levels": False})
        frame = model_frame(formula("y", "g"), grouped_data)
        assert frame.levels(Symbol("g")) == ["u", "v", "w"]

    def test_source_table_not_modified(self, grouped_data):
        original = grouped_data.copy()
        frame = model_frame(formula("y", call("+", "x", "g", "s")), grouped_data)
        frame.data.iloc[0, 0] = -100.0
        pd.testing.assert_frame_equal(grouped_data, original)

    def test_intercept_only_formula(self, grouped_data):
        frame = model_frame(formula(None, 1), grouped_data)
        assert frame.data.shape == (6, 0)
        assert frame.retained_mask.all()

    def test_strings_become_sorted_categoricals(self, grouped_data):
        frame = model_frame(formula(None, "s"), grouped_data)
        assert frame.is_categorical(Symbol("s"))
        assert frame.levels(Symbol("s")) == ["hi", "lo", "mid"]

    def test_strings_rejected_when_not_categorical(self, grouped_data):
        formula_jax.configure(**{"frame.strings_as_categorical": False})
        with pytest.raises(DataFormatError):
            model_frame(formula(None, "s"), grouped_data)

    def test_bool_column_is_numeric(self):
        data = pd.DataFrame({"flag": [True, False, True]})
        frame = model_frame(formula(None, "flag"), data)
        np.testing.assert_array_equal(frame.column(Symbol("flag")), [1.0, 0.0, 1.0])

    def test_evaluated_terms(self, grouped_data):
        frame = model_frame(formula(None, call("log", "c")), grouped_data)
        assert list(frame.data.columns) == ["log(c)"]
        np.testing.assert_allclose(frame.column(call("log", "c")), [0, 1, 2, 0, 1, 2])

    def test_missing_column(self, y_a_b_data):
        with pytest.raises(DataFormatError) as excinfo:
            model_frame(formula("y", "z"), y_a_b_data)
        assert "Available columns: y, a, b" in str(excinfo.value)
        assert excinfo.value.context["missing_columns"] == ["z"]

    def test_evaluator_length_checked(self, grouped_data):
        builder = ModelFrameBuilder(evaluator=lambda node, data: np.zeros(2))
        with pytest.raises(DataFormatError):
            builder.build(formula(None, call("log", "c")), grouped_data)

    def test_custom_na_action(self, grouped_data):
        keep_all = lambda df: (df, np.ones(len(df), dtype=bool))
        frame = model_frame(formula(None, "g"), grouped_data, na_action=keep_all)
        assert frame.n_rows == 6

    def test_requires_dataframe(self, y_a_plus_b):
        with pytest.raises(DataFormatError):
            model_frame(y_a_plus_b, {"y": [1.0], "a": [1.0], "b": [1.0]})


class TestModelResponse:
    """Test response extraction."""

    def test_response_is_a_copy(self, y_a_b_data, y_a_plus_b):
        frame = model_frame(y_a_plus_b, y_a_b_data)
        response = model_response(frame)
        np.testing.assert_array_equal(response, [0.5, 1.5, 2.5, 3.5])
        response[0] = 99.0
        assert frame.data["y"].iloc[0] == 0.5

    def test_response_follows_row_filtering(self, grouped_data):
        frame = model_frame(formula("y", "g"), grouped_data)
        np.testing.assert_array_equal(frame.response(), [1.0, 2.0, 4.0, 5.0, 6.0])

    def test_one_sided_formula(self, grouped_data):
        frame = model_frame(formula(None, "x"), grouped_data)
        with pytest.raises(MissingResponseError) as excinfo:
            model_response(frame)
        assert excinfo.value.error_code == "MISSING_RESPONSE"
