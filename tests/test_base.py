"""Shared base test classes, run once per threading configuration."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pandas as pd
from conftest import COLS, ONE_ARY

from arminer import (
    InvalidParameterError,
    Itemset,
    build,
    from_onehot,
    generate,
    mine,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def assert_raises(error_type: type, substr: str, func: Callable, *args, **kwargs) -> None:
    """Assert that *func* raises *error_type* with *substr* in its message."""
    try:
        func(*args, **kwargs)
        raise AssertionError(f"Expected {error_type.__name__} to be raised")
    except error_type as e:
        assert substr in str(e), f"Expected '{substr}' in '{e}'"


def labelled(itemsets: list[Itemset], index) -> dict[frozenset[str], float]:
    return {frozenset(s.labels(index)): s.support for s in itemsets}


# ---------------------------------------------------------------------------
# Edge case tests
# ---------------------------------------------------------------------------


class MiningTestEdgeCases:
    def setUp(self, n_jobs: int) -> None:
        self.n_jobs = n_jobs

    def test_all_ones(self) -> None:
        _, index = build({"t1": {"A", "B"}, "t2": {"A", "B"}, "t3": {"A", "B"}})
        res = mine(index, index.n_transactions, 1.0, n_jobs=self.n_jobs)
        assert len(res) == 3

    def test_min_support_too_high(self) -> None:
        _, index = build({"t1": {"A"}, "t2": {"B"}})
        res = mine(index, index.n_transactions, 1.0, n_jobs=self.n_jobs)
        assert res == []
        assert generate(res, index, 0.5, n_jobs=self.n_jobs) == []

    def test_empty_index(self) -> None:
        _, index = build([])
        assert mine(index, 0, 0.5, n_jobs=self.n_jobs) == []

    def test_single_transaction(self) -> None:
        _, index = build([("only", {"x", "y", "z"})])
        res = mine(index, 1, 0.5, n_jobs=self.n_jobs)
        # every non-empty subset of {x, y, z}
        assert len(res) == 7
        assert all(s.support == 1.0 for s in res)


# ---------------------------------------------------------------------------
# Error tests
# ---------------------------------------------------------------------------


class MiningTestErrors:
    def setUp(self, n_jobs: int) -> None:
        self.n_jobs = n_jobs
        _, self.index = from_onehot(pd.DataFrame(ONE_ARY, columns=COLS))

    def test_min_support_zero(self) -> None:
        assert_raises(
            InvalidParameterError,
            "`min_support` must be a positive number within the interval `(0, 1]`",
            mine,
            self.index,
            self.index.n_transactions,
            0.0,
            n_jobs=self.n_jobs,
        )

    def test_min_support_above_one(self) -> None:
        assert_raises(
            InvalidParameterError,
            "Got 1.5",
            mine,
            self.index,
            self.index.n_transactions,
            1.5,
            n_jobs=self.n_jobs,
        )

    def test_min_support_nan(self) -> None:
        assert_raises(InvalidParameterError, "min_support", mine, self.index, 5, float("nan"))

    def test_min_support_not_a_number(self) -> None:
        assert_raises(InvalidParameterError, "min_support", mine, self.index, 5, "0.5")

    def test_bad_max_len(self) -> None:
        assert_raises(InvalidParameterError, "max_len", mine, self.index, 5, 0.5, max_len=0)

    def test_total_smaller_than_index(self) -> None:
        assert_raises(InvalidParameterError, "total_transactions", mine, self.index, 3, 0.5)

    def test_min_confidence_out_of_range(self) -> None:
        res = mine(self.index, self.index.n_transactions, 0.6, n_jobs=self.n_jobs)
        assert_raises(InvalidParameterError, "min_confidence", generate, res, self.index, 0.0)
        assert_raises(InvalidParameterError, "min_confidence", generate, res, self.index, 1.01)


# ---------------------------------------------------------------------------
# Example 1: the 5 x 11 market basket
# ---------------------------------------------------------------------------


class MiningTestEx1:
    def setUp(self, n_jobs: int) -> None:
        self.n_jobs = n_jobs
        self.df = pd.DataFrame(ONE_ARY, columns=COLS).astype(bool)
        _, self.index = from_onehot(self.df)
        self.itemsets = mine(self.index, self.index.n_transactions, 0.6, n_jobs=self.n_jobs)

    def test_frequent_itemsets(self) -> None:
        expect = {
            frozenset({"Eggs"}): 0.8,
            frozenset({"Kidney Beans"}): 1.0,
            frozenset({"Milk"}): 0.6,
            frozenset({"Onion"}): 0.6,
            frozenset({"Yogurt"}): 0.6,
            frozenset({"Eggs", "Kidney Beans"}): 0.8,
            frozenset({"Eggs", "Onion"}): 0.6,
            frozenset({"Kidney Beans", "Milk"}): 0.6,
            frozenset({"Kidney Beans", "Onion"}): 0.6,
            frozenset({"Kidney Beans", "Yogurt"}): 0.6,
            frozenset({"Eggs", "Kidney Beans", "Onion"}): 0.6,
        }
        got = labelled(self.itemsets, self.index)
        assert got.keys() == expect.keys()
        for key, sup in expect.items():
            np.testing.assert_allclose(got[key], sup)

    def test_ordering(self) -> None:
        keys = [(len(s), s.items) for s in self.itemsets]
        assert keys == sorted(keys)

    def test_max_len(self) -> None:
        res = mine(self.index, self.index.n_transactions, 0.6, max_len=1, n_jobs=self.n_jobs)
        assert max(len(s) for s in res) == 1
        assert len(res) == 5

        res = mine(self.index, self.index.n_transactions, 0.6, max_len=2, n_jobs=self.n_jobs)
        assert max(len(s) for s in res) == 2
        assert len(res) == 10

    def test_rules_confidence(self) -> None:
        rules = generate(self.itemsets, self.index, 0.8, n_jobs=self.n_jobs)
        assert len(rules) == 9

    def test_rules_all(self) -> None:
        rules = generate(self.itemsets, self.index, 0.01, n_jobs=self.n_jobs)
        # 5 pairs x 2 directions + 6 splits of the single triple
        assert len(rules) == 16
        assert sum(r.lift >= 1.1 for r in rules) == 6

    def test_lower_support_superset(self) -> None:
        res = mine(self.index, self.index.n_transactions, 0.4, n_jobs=self.n_jobs)
        high = {s.items for s in self.itemsets}
        low = {s.items for s in res}
        assert high < low
