from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd

    from .apriori import Itemset
    from .association_rules import Rule
    from .transactions import ItemIndex

RULE_COLUMNS = [
    "antecedents",
    "consequents",
    "antecedent support",
    "consequent support",
    "support",
    "support_count",
    "confidence",
    "lift",
    "leverage",
    "conviction",
    "zhangs_metric",
    "jaccard",
    "certainty",
    "kulczynski",
]

ITEMSET_COLUMNS = ["support", "support_count", "itemsets"]


def _convert(df: pd.DataFrame, format: str) -> Any:
    if format == "pandas":
        return df
    if format == "polars":
        from ._compat import import_polars

        pl = import_polars("Needed for format='polars'.")

        # Convert tuples to lists for Arrow compatibility
        df = df.copy()
        for col in ["antecedents", "consequents", "itemsets"]:
            if col in df.columns:
                df[col] = df[col].apply(list)
        return pl.from_pandas(df)
    raise ValueError(f"`format` must be 'pandas' or 'polars'. Got: {format}")


def itemsets_to_frame(itemsets: Sequence[Itemset], index: ItemIndex, format: str = "pandas") -> Any:
    """Frequent itemsets as a DataFrame with ``support``, ``support_count`` and ``itemsets`` columns.

    ``itemsets`` holds tuples of item labels.  The transaction count is kept
    in ``df.attrs["num_itemsets"]``.

    Parameters
    ----------
    itemsets : Sequence[Itemset]
        Output of :func:`arminer.mine`.
    index : ItemIndex
        Index used to translate item ids back to labels.
    format : str, default="pandas"
        ``"pandas"`` or ``"polars"``.
    """
    import pandas as pd

    df = pd.DataFrame(
        {
            "support": [s.support for s in itemsets],
            "support_count": [s.support_count for s in itemsets],
            "itemsets": [index.labels(s.items) for s in itemsets],
        },
        columns=ITEMSET_COLUMNS,
    )
    df["support"] = df["support"].astype(float)
    df["support_count"] = df["support_count"].astype(int)
    df.attrs["num_itemsets"] = index.n_transactions
    return _convert(df, format)


def rules_to_frame(rules: Sequence[Rule], format: str = "pandas") -> Any:
    """Association rules as a DataFrame, one row per rule, in the given order.

    ``antecedents`` and ``consequents`` hold tuples of item labels, ready for
    ``sort_values`` or a substring filter such as
    ``df[df["consequents"].apply(lambda c: any("poverty" in x for x in c))]``.

    Parameters
    ----------
    rules : Sequence[Rule]
        Output of :func:`arminer.generate`.
    format : str, default="pandas"
        ``"pandas"`` or ``"polars"``.
    """
    import pandas as pd

    df = pd.DataFrame(
        {
            "antecedents": [r.antecedent_labels for r in rules],
            "consequents": [r.consequent_labels for r in rules],
            "antecedent support": [r.antecedent_support for r in rules],
            "consequent support": [r.consequent_support for r in rules],
            "support": [r.support for r in rules],
            "support_count": [r.support_count for r in rules],
            "confidence": [r.confidence for r in rules],
            "lift": [r.lift for r in rules],
            "leverage": [r.leverage for r in rules],
            "conviction": [r.conviction for r in rules],
            "zhangs_metric": [r.zhangs_metric for r in rules],
            "jaccard": [r.jaccard for r in rules],
            "certainty": [r.certainty for r in rules],
            "kulczynski": [r.kulczynski for r in rules],
        },
        columns=RULE_COLUMNS,
    )
    for col in RULE_COLUMNS[2:]:
        df[col] = df[col].astype(int if col == "support_count" else float)
    return _convert(df, format)
