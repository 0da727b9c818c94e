from __future__ import annotations

import logging
import math
import warnings
from collections.abc import Collection, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._compat import to_pandas
from .exceptions import DuplicateEntityError, InvalidParameterError

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

logger = logging.getLogger(__name__)

_PREVIEW = 5


@dataclass(frozen=True)
class Transaction:
    """One entity (e.g. a county) and the ids of the items it carries."""

    key: str
    items: frozenset[int]

    def __len__(self) -> int:
        return len(self.items)


class TransactionStore:
    """Immutable, ordered collection of :class:`Transaction` records.

    The position of a transaction in the store is the transaction id used by
    the posting sets of the matching :class:`ItemIndex`.
    """

    def __init__(self, transactions: Sequence[Transaction]) -> None:
        self._transactions = tuple(transactions)
        self._positions = {t.key: i for i, t in enumerate(self._transactions)}

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(t.key for t in self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __getitem__(self, key: str) -> Transaction:
        return self._transactions[self._positions[key]]

    def position(self, key: str) -> int:
        """Transaction id of *key* (its index in the posting sets)."""
        return self._positions[key]

    def labels_of(self, key: str, index: ItemIndex) -> frozenset[str]:
        return frozenset(index.labels(self[key].items))

    def __repr__(self) -> str:
        return f"TransactionStore(n_transactions={len(self)})"


class ItemIndex:
    """Dense item ids plus one posting set (inverted index) per item.

    ``posting(i)`` is the frozenset of transaction ids that contain item *i*.
    The support count of an itemset is the size of the intersection of its
    items' posting sets; intersections always start from the smallest set so
    the cost is bounded by the rarest item, not by the number of transactions.
    The index is read-only once built and may be shared between threads.
    """

    def __init__(
        self,
        labels: Sequence[str],
        postings: Sequence[frozenset[int]],
        n_transactions: int,
    ) -> None:
        if len(labels) != len(postings):
            raise InvalidParameterError(f"Got {len(labels)} item labels but {len(postings)} posting sets.")
        self._labels = tuple(labels)
        self._postings = tuple(frozenset(p) for p in postings)
        self._ids = {label: i for i, label in enumerate(self._labels)}
        if len(self._ids) != len(self._labels):
            raise InvalidParameterError("Item labels must be unique.")
        self._n_transactions = int(n_transactions)

    @property
    def n_items(self) -> int:
        return len(self._labels)

    @property
    def n_transactions(self) -> int:
        return self._n_transactions

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._ids

    def id_of(self, label: str) -> int:
        return self._ids[label]

    def label_of(self, item_id: int) -> str:
        return self._labels[item_id]

    def labels(self, ids: Iterable[int]) -> tuple[str, ...]:
        return tuple(self._labels[i] for i in ids)

    def ids(self, labels: Iterable[str], strict: bool = True) -> tuple[int, ...]:
        """Sorted ids of *labels*.

        With ``strict=False`` labels that never occur in the data are skipped
        instead of raising ``KeyError``.
        """
        if strict:
            return tuple(sorted(self._ids[label] for label in labels))
        return tuple(sorted(self._ids[label] for label in labels if label in self._ids))

    def posting(self, item_id: int) -> frozenset[int]:
        return self._postings[item_id]

    def item_counts(self) -> list[int]:
        return [len(p) for p in self._postings]

    def tidset(self, ids: Iterable[int]) -> frozenset[int]:
        """Ids of the transactions containing every item in *ids*."""
        postings = sorted((self._postings[i] for i in ids), key=len)
        if not postings:
            return frozenset(range(self._n_transactions))
        result = postings[0]
        for posting in postings[1:]:
            if not result:
                break
            result = result & posting
        return result

    def support_count(self, ids: Iterable[int]) -> int:
        return len(self.tidset(ids))

    def __repr__(self) -> str:
        return f"ItemIndex(n_items={self.n_items}, n_transactions={self.n_transactions})"


def _entity_key(key: Any) -> str:
    if key is None or (isinstance(key, float) and math.isnan(key)):
        raise DuplicateEntityError(f"Entity keys must be non-empty, got {key!r}.")
    text = str(key)
    if not text:
        raise DuplicateEntityError("Entity keys must be non-empty, got an empty string.")
    return text


def _item_label(item: Any, key: str) -> str:
    if item is None:
        raise InvalidParameterError(f"Transaction {key!r} contains a missing (None) item.")
    text = str(item)
    if not text:
        raise InvalidParameterError(f"Transaction {key!r} contains an empty item label.")
    return text


def build(
    transactions: Iterable[tuple[Any, Iterable[Any]]] | Mapping[Any, Iterable[Any]],
) -> tuple[TransactionStore, ItemIndex]:
    """Build the transaction store and the inverted item index in one pass.

    Parameters
    ----------
    transactions
        ``(entity_key, items)`` pairs or a mapping ``entity_key -> items``.
        Keys and item labels are compared by their ``str()`` form.

    Returns
    -------
    tuple[TransactionStore, ItemIndex]

    Raises
    ------
    DuplicateEntityError
        If an entity key is empty or occurs twice.
    InvalidParameterError
        If an entry is not a pair, its items are a bare string, or an item
        label is empty.

    Notes
    -----
    Transactions without items are dropped with a ``UserWarning``; they are
    not counted in ``ItemIndex.n_transactions``.  Item ids follow the order in
    which labels are first seen (labels inside one transaction are visited in
    sorted order so that ``set`` inputs give reproducible ids).
    """
    pairs: Iterable[Any] = transactions.items() if isinstance(transactions, Mapping) else transactions

    seen_keys: set[str] = set()
    label_ids: dict[str, int] = {}
    labels: list[str] = []
    postings: list[set[int]] = []
    records: list[Transaction] = []
    dropped: list[str] = []

    for entry in pairs:
        try:
            raw_key, raw_items = entry
        except (TypeError, ValueError) as e:
            raise InvalidParameterError(f"Expected (entity_key, items) pairs, got {entry!r}.") from e

        key = _entity_key(raw_key)
        if key in seen_keys:
            raise DuplicateEntityError(f"Entity key {key!r} occurs more than once.")
        seen_keys.add(key)

        if isinstance(raw_items, (str, bytes)) or not isinstance(raw_items, Iterable):
            raise InvalidParameterError(
                f"Items of transaction {key!r} must be a collection of labels, got {type(raw_items).__name__}."
            )

        tx_labels = sorted({_item_label(item, key) for item in raw_items})
        if not tx_labels:
            dropped.append(key)
            continue

        tx_id = len(records)
        ids = []
        for label in tx_labels:
            item_id = label_ids.get(label)
            if item_id is None:
                item_id = len(labels)
                label_ids[label] = item_id
                labels.append(label)
                postings.append(set())
            postings[item_id].add(tx_id)
            ids.append(item_id)
        records.append(Transaction(key=key, items=frozenset(ids)))

    if dropped:
        preview = ", ".join(repr(k) for k in dropped[:_PREVIEW])
        if len(dropped) > _PREVIEW:
            preview += ", ..."
        warnings.warn(
            f"Dropped {len(dropped)} transaction(s) without items: {preview}",
            UserWarning,
            stacklevel=2,
        )
        logger.debug("dropped %d empty transactions", len(dropped))

    store = TransactionStore(records)
    index = ItemIndex(labels, [frozenset(p) for p in postings], len(records))
    logger.debug("built index: %d transactions, %d distinct items", index.n_transactions, index.n_items)
    return store, index


# ---------------------------------------------------------------------------
# Input adapters
# ---------------------------------------------------------------------------


def _is_pair(entry: Any) -> bool:
    return (
        isinstance(entry, (tuple, list))
        and len(entry) == 2
        and isinstance(entry[1], Collection)
        and not isinstance(entry[1], (str, bytes))
    )


def from_transactions(
    data: Mapping[Any, Iterable[Any]] | Sequence[Any] | pd.DataFrame | pl.DataFrame | Any,
) -> tuple[TransactionStore, ItemIndex]:
    """Build the store and index from any supported transaction layout.

    Parameters
    ----------
    data
        One of:

        - **Mapping** ``entity_key -> items``, e.g. ``{"06037": {"poverty=Q4"}}``.
        - **List of pairs** ``[(entity_key, items), ...]``.
        - **List of item lists** ``[["bread", "milk"], ["bread"]]``; entity keys
          are the positions ``"0"``, ``"1"``, ...
        - **Pandas / Polars / PyArrow DataFrame** in long format, forwarded to
          :func:`from_pandas`.

    Examples
    --------
    >>> store, index = from_transactions({"T1": {"a", "b"}, "T2": {"a"}})
    >>> index.support_count([index.id_of("a")])
    2
    """
    data = to_pandas(data)

    if isinstance(data, Mapping):
        return build(data)

    if type(data).__name__ == "DataFrame" and getattr(type(data), "__module__", "").startswith("pandas"):
        return from_pandas(data)

    if not isinstance(data, (list, tuple)):
        raise TypeError(f"Expected a mapping, a list of transactions or a DataFrame, got {type(data)}")

    pair_flags = [_is_pair(entry) for entry in data]
    if all(pair_flags):
        return build(data)
    if any(pair_flags):
        raise InvalidParameterError(
            "Mixed input: pass either (entity_key, items) pairs or plain item lists, not both."
        )
    return build((str(i), items) for i, items in enumerate(data))


def from_pandas(
    df: pd.DataFrame | pl.DataFrame | Any,
    transaction_col: str | None = None,
    item_col: str | None = None,
) -> tuple[TransactionStore, ItemIndex]:
    """Build from a long-format frame with one row per (transaction, item).

    Parameters
    ----------
    df
        Frame with (at least) a transaction id column and an item column.
    transaction_col
        Name of the transaction id column. Defaults to the first column.
    item_col
        Name of the item column. Defaults to the second column.

    Rows whose item is null are ignored; a transaction whose rows are all
    null is dropped like any other empty transaction.
    """
    import pandas as pd

    df = to_pandas(df)
    cols = list(df.columns)

    if len(cols) < 2:
        raise InvalidParameterError(
            f"DataFrame must have at least 2 columns (transaction id + item), got {len(cols)}: {cols}"
        )

    txn_col = transaction_col if transaction_col is not None else cols[0]
    itm_col = item_col if item_col is not None else cols[1]

    if txn_col not in df.columns:
        raise InvalidParameterError(f"Transaction column '{txn_col}' not found. Available columns: {cols}")
    if itm_col not in df.columns:
        raise InvalidParameterError(f"Item column '{itm_col}' not found. Available columns: {cols}")

    groups: dict[Any, list[Any]] = {}
    for key, item in zip(df[txn_col], df[itm_col]):
        bucket = groups.setdefault(key, [])
        if not pd.isna(item):
            bucket.append(item)

    return build(groups.items())


def _split_keys(df: pd.DataFrame, key_col: str | None) -> tuple[Sequence[Any], pd.DataFrame]:
    if key_col is None:
        return list(df.index), df
    if key_col not in df.columns:
        raise InvalidParameterError(f"Key column '{key_col}' not found. Available columns: {list(df.columns)}")
    return list(df[key_col]), df.drop(columns=[key_col])


def from_onehot(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    key_col: str | None = None,
    item_names: Sequence[str] | None = None,
) -> tuple[TransactionStore, ItemIndex]:
    """Build from a one-hot encoded frame or array (rows = transactions, columns = items).

    Parameters
    ----------
    df
        Boolean or 0/1 pandas / Polars frame, or a 2-D numpy array.
    key_col
        Column holding entity keys.  Defaults to the frame index (row
        positions for arrays).
    item_names
        Column labels to use for a numpy array.  Defaults to ``"0"``, ``"1"``, ...
    """
    import numpy as np
    import pandas as pd

    from ._validation import valid_input_check

    data = to_pandas(df)
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise InvalidParameterError(f"Expected a 2-D array, got {data.ndim} dimension(s).")
        names = list(item_names) if item_names is not None else [str(i) for i in range(data.shape[1])]
        if len(names) != data.shape[1]:
            raise InvalidParameterError(f"Got {len(names)} item names for {data.shape[1]} columns.")
        data = pd.DataFrame(data, columns=names)

    if not isinstance(data, pd.DataFrame):
        raise TypeError(f"Expected a pandas/polars DataFrame or numpy array, got {type(df)}")

    keys, items_df = _split_keys(data, key_col)
    valid_input_check(items_df)

    if hasattr(items_df, "sparse"):
        items_df = items_df.sparse.to_dense()

    columns = [str(c) for c in items_df.columns]
    values = items_df.astype(bool).to_numpy(dtype=bool)

    return build((key, [columns[j] for j in np.flatnonzero(row)]) for key, row in zip(keys, values))


def _cell_label(value: Any) -> str:
    import numpy as np

    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def from_attributes(
    df: pd.DataFrame | pl.DataFrame | Any,
    key_col: str | None = None,
    sep: str = "=",
) -> tuple[TransactionStore, ItemIndex]:
    """Build from an attribute/value table, one row per entity.

    Every non-null cell becomes the item ``"<column><sep><value>"``, so a
    discretized table like

    ========  ============  ===========
    fips      poverty_rate  median_age
    ========  ============  ===========
    06037     Q4            Q2
    ========  ============  ===========

    yields the transaction ``"06037" -> {"poverty_rate=Q4", "median_age=Q2"}``
    with ``key_col="fips"``.  Whole-number floats are written without the
    decimal point (``"rank=3"``, not ``"rank=3.0"``), since a null in an integer
    column makes pandas store the column as floats.

    Parameters
    ----------
    df
        Pandas / Polars / PyArrow table of categorical labels.
    key_col
        Column holding entity keys.  Defaults to the frame index.
    sep
        Separator placed between the column name and the value.
    """
    import pandas as pd

    data = to_pandas(df)
    if not isinstance(data, pd.DataFrame):
        raise TypeError(f"Expected a pandas/polars DataFrame, got {type(df)}")

    keys, attrs = _split_keys(data, key_col)
    columns = [str(c) for c in attrs.columns]

    def _row_items(row: tuple[Any, ...]) -> list[str]:
        return [f"{col}{sep}{_cell_label(value)}" for col, value in zip(columns, row) if not pd.isna(value)]

    return build((key, _row_items(row)) for key, row in zip(keys, attrs.itertuples(index=False, name=None)))
