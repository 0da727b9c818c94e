"""pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys

import numpy as np
import pandas as pd
import pytest

# Ensure tests/ dir is on path so the shared mixins in test_base import
sys.path.insert(0, os.path.dirname(__file__))

# ---------------------------------------------------------------------------
# Four-transaction basket used by the worked examples
# ---------------------------------------------------------------------------

BASKET = {
    "T1": {"a", "b"},
    "T2": {"a", "b"},
    "T3": {"a"},
    "T4": {"b", "c"},
}

# ---------------------------------------------------------------------------
# Classic 5 x 11 one-hot market basket (mlxtend test data)
# ---------------------------------------------------------------------------

ONE_ARY = np.array(
    [
        [0, 0, 0, 1, 0, 1, 1, 1, 1, 0, 1],
        [0, 0, 1, 1, 0, 1, 0, 1, 1, 0, 1],
        [1, 0, 0, 1, 0, 1, 1, 0, 0, 0, 0],
        [0, 1, 0, 0, 0, 1, 1, 0, 0, 1, 1],
        [0, 1, 0, 1, 1, 1, 0, 0, 1, 0, 0],
    ]
)

COLS = [
    "Apple",
    "Corn",
    "Dill",
    "Eggs",
    "Ice cream",
    "Kidney Beans",
    "Milk",
    "Nutmeg",
    "Onion",
    "Unicorn",
    "Yogurt",
]


@pytest.fixture
def basket() -> dict[str, set[str]]:
    return {key: set(items) for key, items in BASKET.items()}


@pytest.fixture
def onehot_df() -> pd.DataFrame:
    return pd.DataFrame(ONE_ARY, columns=COLS).astype(bool)


@pytest.fixture
def county_quartiles() -> pd.DataFrame:
    """Quartile labels per county, as produced by the discretization step."""
    return pd.DataFrame(
        {
            "fips": ["01001", "01003", "01005", "01007", "01009", "01011"],
            "poverty_rate": ["Q4", "Q1", "Q4", "Q4", "Q2", "Q4"],
            "unemployment": ["Q4", "Q2", "Q4", "Q3", "Q2", "Q4"],
            "nitrate": ["Q3", "Q1", "Q3", "Q3", None, "Q1"],
        }
    )
