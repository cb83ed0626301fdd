"""
Shared pytest configuration and fixtures for formula-jax tests.

This module provides common test fixtures, utilities, and configuration
used across the test suite.
"""

import pytest
import numpy as np
import pandas as pd

import formula_jax
from formula_jax.formulas.expressions import call, formula


@pytest.fixture(autouse=True)
def reset_configuration():
    """Give every test the default global configuration."""
    formula_jax.reset_config()
    yield
    formula_jax.reset_config()


@pytest.fixture
def y_a_b_data():
    """Numeric response, numeric predictor and a two-level categorical."""
    return pd.DataFrame({
        "y": [0.5, 1.5, 2.5, 3.5],
        "a": [1.0, 2.0, 3.0, 4.0],
        "b": pd.Categorical(["p", "q", "q", "p"]),
    })


@pytest.fixture
def grouped_data():
    """Three-level categorical with one missing entry, plus numerics."""
    return pd.DataFrame({
        "y": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "x": [0.5, 1.0, 1.5, 2.0, 2.5, 3.0],
        "g": pd.Categorical(["u", "v", None, "w", "u", "v"], categories=["u", "v", "w"]),
        "s": ["lo", "hi", "lo", "hi", "mid", "lo"],
        "c": [1.0, np.e, np.e ** 2, 1.0, np.e, np.e ** 2],
    })


@pytest.fixture
def y_a_plus_b():
    """Formula y ~ a + b."""
    return formula("y", call("+", "a", "b"))


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (medium speed)"
    )
