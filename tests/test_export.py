"""DataFrame export tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from arminer import build, from_onehot, generate, itemsets_to_frame, mine, rules_to_frame
from arminer.export import ITEMSET_COLUMNS, RULE_COLUMNS


@pytest.fixture
def fitted(onehot_df):
    _, index = from_onehot(onehot_df)
    itemsets = mine(index, index.n_transactions, 0.6)
    rules = generate(itemsets, index, 0.7)
    return itemsets, rules, index


def test_itemsets_frame(fitted) -> None:
    itemsets, _, index = fitted
    df = itemsets_to_frame(itemsets, index)

    assert list(df.columns) == ITEMSET_COLUMNS
    assert len(df) == 11
    assert df.attrs["num_itemsets"] == 5
    assert df["support"].dtype == np.float64
    assert df.loc[df["itemsets"].apply(lambda s: s == ("Kidney Beans",)), "support_count"].item() == 5
    assert set(df["itemsets"].apply(len)) == {1, 2, 3}


def test_rules_frame(fitted) -> None:
    _, rules, _ = fitted
    df = rules_to_frame(rules)

    assert list(df.columns) == RULE_COLUMNS
    assert len(df) == len(rules)
    assert {"leverage", "conviction", "zhangs_metric", "jaccard", "certainty", "kulczynski"} <= set(df.columns)
    assert df["antecedents"].tolist() == [r.antecedent_labels for r in rules]
    np.testing.assert_allclose(df["confidence"].to_numpy(), [r.confidence for r in rules])
    assert (df["confidence"] >= 0.7).all()


def test_rules_frame_filter_by_label(fitted) -> None:
    _, rules, _ = fitted
    df = rules_to_frame(rules)
    onion = df[df["consequents"].apply(lambda c: any("Onion" in x for x in c))]
    assert len(onion) > 0
    assert all("Onion" in c for c in onion["consequents"])


def test_empty_frames() -> None:
    _, index = build({"t1": {"a"}, "t2": {"b"}})
    itemsets = mine(index, index.n_transactions, 1.0)

    df = itemsets_to_frame(itemsets, index)
    assert df.empty
    assert list(df.columns) == ITEMSET_COLUMNS

    rules = rules_to_frame([])
    assert rules.empty
    assert list(rules.columns) == RULE_COLUMNS


def test_infinite_conviction(basket) -> None:
    _, index = build(basket)
    itemsets = mine(index, index.n_transactions, 0.25)
    df = rules_to_frame(generate(itemsets, index, 1.0))
    # {c} => {b} always holds
    row = df[df["antecedents"].apply(lambda a: a == ("c",))]
    assert row["consequents"].tolist() == [("b",)]
    assert np.isinf(row["conviction"].item())


def test_polars_format(fitted) -> None:
    pl = pytest.importorskip("polars")
    pytest.importorskip("pyarrow")
    itemsets, rules, index = fitted

    df = itemsets_to_frame(itemsets, index, format="polars")
    assert isinstance(df, pl.DataFrame)
    assert df.columns == ITEMSET_COLUMNS
    assert df.height == 11

    df = rules_to_frame(rules, format="polars")
    assert isinstance(df, pl.DataFrame)
    assert df.columns == RULE_COLUMNS


def test_bad_format(fitted) -> None:
    itemsets, _, index = fitted
    with pytest.raises(ValueError, match="`format` must be"):
        itemsets_to_frame(itemsets, index, format="arrow")


def test_frame_is_pandas(fitted) -> None:
    itemsets, _, index = fitted
    assert isinstance(itemsets_to_frame(itemsets, index), pd.DataFrame)
