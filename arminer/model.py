"""Estimator-style front end that runs index building, mining and rule generation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from ._validation import check_fraction, check_max_len, check_n_jobs

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl
    from typing_extensions import Self

    from .apriori import Itemset
    from .association_rules import AppearanceConstraint, Rule
    from .transactions import ItemIndex, TransactionStore


class Apriori:
    """Apriori frequent itemset miner and association rule generator.

    Parameters
    ----------
    min_support : float, default=0.5
        Minimum support threshold (fraction of transactions) in ``(0, 1]``.
    min_confidence : float | None, default=None
        Minimum confidence for association rules.  ``None`` skips rule
        generation during :meth:`fit`.
    constraint : AppearanceConstraint | None, default=None
        Restricts the items allowed on each side of generated rules.
    max_len : int | None, default=None
        Maximum length of frequent itemsets.  ``None`` means no limit.
    n_jobs : int, default=1
        Worker threads for support counting and rule enumeration.
    verbose : int, default=0
        If > 0, print progress details to standard output.

    Examples
    --------
    .. code-block:: python

        from arminer import Apriori, AppearanceConstraint

        model = Apriori(
            min_support=0.1,
            min_confidence=0.6,
            constraint=AppearanceConstraint.only(consequent=["poverty_rate=Q4"]),
        ).fit(quartiles_df, layout="attributes", key_col="fips")
        model.association_rules_.sort_values("lift", ascending=False)
    """

    def __init__(
        self,
        min_support: float = 0.5,
        min_confidence: float | None = None,
        constraint: AppearanceConstraint | None = None,
        max_len: int | None = None,
        n_jobs: int = 1,
        verbose: int = 0,
    ) -> None:
        self.min_support = check_fraction("min_support", min_support)
        self.min_confidence = None if min_confidence is None else check_fraction("min_confidence", min_confidence)
        self.constraint = constraint
        self.max_len = check_max_len(max_len)
        self.n_jobs = check_n_jobs(n_jobs)
        self.verbose = verbose

        self.store_: TransactionStore | None = None
        self.index_: ItemIndex | None = None
        self.itemsets_: list[Itemset] | None = None
        self.rules_: list[Rule] | None = None

    # ------------------------------------------------------------------
    # Class-method constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_pandas(
        cls,
        df: pd.DataFrame | pl.DataFrame,
        transaction_col: str | None = None,
        item_col: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Create and fit from a long-format frame (one row per transaction/item pair)."""
        return cls(**kwargs).fit(df, layout="long", transaction_col=transaction_col, item_col=item_col)

    @classmethod
    def from_onehot(
        cls,
        df: pd.DataFrame | pl.DataFrame | np.ndarray,
        key_col: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Create and fit from a one-hot encoded frame or array."""
        return cls(**kwargs).fit(df, layout="onehot", key_col=key_col)

    @classmethod
    def from_attributes(
        cls,
        df: pd.DataFrame | pl.DataFrame,
        key_col: str | None = None,
        sep: str = "=",
        **kwargs: Any,
    ) -> Self:
        """Create and fit from an attribute/value table (e.g. quartile labels per county)."""
        return cls(**kwargs).fit(df, layout="attributes", key_col=key_col, sep=sep)

    # ------------------------------------------------------------------
    # Fit
    # ------------------------------------------------------------------

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(f"[{time.strftime('%X')}] {msg}")

    def fit(self, data: Any, layout: str = "auto", **kwargs: Any) -> Self:
        """Build the item index from *data*, mine it, and generate rules.

        Parameters
        ----------
        data
            Transactions in any layout accepted by the adapters in
            :mod:`arminer.transactions`.
        layout : str, default="auto"
            ``"auto"`` (mapping / list input, or a long-format frame),
            ``"long"``, ``"onehot"`` or ``"attributes"``.
        **kwargs
            Forwarded to the adapter (``transaction_col``, ``item_col``,
            ``key_col``, ``sep``).
        """
        from .apriori import mine
        from .transactions import from_attributes, from_onehot, from_pandas, from_transactions

        adapters = {
            "auto": from_transactions,
            "long": from_pandas,
            "onehot": from_onehot,
            "attributes": from_attributes,
        }
        if layout not in adapters:
            raise ValueError(f"`layout` must be one of {sorted(adapters)}. Got: {layout}")

        t0 = time.perf_counter()
        self.store_, self.index_ = adapters[layout](data, **kwargs)
        self._log(
            f"Indexed {self.index_.n_transactions:,} transactions over {self.index_.n_items:,} distinct items."
        )

        self.itemsets_ = mine(
            self.index_,
            self.index_.n_transactions,
            self.min_support,
            max_len=self.max_len,
            n_jobs=self.n_jobs,
        )
        self._log(f"Mined {len(self.itemsets_):,} frequent itemsets (min_support={self.min_support}).")

        if self.min_confidence is not None:
            self.rules_ = self._generate(self.min_confidence, self.constraint)
            self._log(f"Generated {len(self.rules_):,} rules (min_confidence={self.min_confidence}).")
        else:
            self.rules_ = None

        self._log(f"Done in {time.perf_counter() - t0:.2f}s.")
        return self

    def _generate(self, min_confidence: float, constraint: AppearanceConstraint | None) -> list[Rule]:
        from .association_rules import generate

        if self.itemsets_ is None or self.index_ is None:
            raise RuntimeError("Call fit() before generating association rules.")
        return generate(self.itemsets_, self.index_, min_confidence, constraint=constraint, n_jobs=self.n_jobs)

    def association_rules(
        self,
        min_confidence: float | None = None,
        constraint: AppearanceConstraint | None = None,
        format: str = "pandas",
    ) -> Any:
        """Rules from the fitted itemsets, possibly with other thresholds.

        Parameters
        ----------
        min_confidence : float | None, default=None
            Defaults to the constructor value.
        constraint : AppearanceConstraint | None, default=None
            Defaults to the constructor value.
        format : str, default="pandas"
            ``"pandas"`` or ``"polars"``.
        """
        from .export import rules_to_frame

        if min_confidence is None:
            min_confidence = self.min_confidence
        if min_confidence is None:
            raise ValueError("Pass min_confidence here or in the constructor to generate rules.")
        if constraint is None:
            constraint = self.constraint
        return rules_to_frame(self._generate(min_confidence, constraint), format=format)

    # ------------------------------------------------------------------
    # Model attributes
    # ------------------------------------------------------------------

    @property
    def freq_itemsets(self) -> pd.DataFrame:
        """Frequent itemsets DataFrame (``support``, ``support_count``, ``itemsets``)."""
        from .export import itemsets_to_frame

        if self.itemsets_ is None or self.index_ is None:
            raise RuntimeError("Call fit() before accessing freq_itemsets.")
        return itemsets_to_frame(self.itemsets_, self.index_)

    @property
    def association_rules_(self) -> pd.DataFrame:
        """Association rules DataFrame (requires *min_confidence* to be set)."""
        from .export import rules_to_frame

        if self.rules_ is None:
            if self.min_confidence is None:
                raise RuntimeError("Set min_confidence in the constructor to generate rules.")
            raise RuntimeError("Call fit() before accessing association_rules_.")
        return rules_to_frame(self.rules_)

    def __repr__(self) -> str:
        fitted = self.itemsets_ is not None
        return (
            f"{type(self).__name__}("
            f"min_support={self.min_support}, "
            f"min_confidence={self.min_confidence}, "
            f"fitted={fitted})"
        )


def apriori(
    data: Any,
    min_support: float = 0.5,
    max_len: int | None = None,
    layout: str = "auto",
    n_jobs: int = 1,
    verbose: int = 0,
    **kwargs: Any,
) -> pd.DataFrame:
    """Find frequent itemsets with the Apriori algorithm.

    This module-level function relies on :class:`Apriori`; *kwargs* go to
    the input adapter selected by *layout*.
    """
    return Apriori(min_support=min_support, max_len=max_len, n_jobs=n_jobs, verbose=verbose).fit(
        data, layout=layout, **kwargs
    ).freq_itemsets
