"""Level-wise (Apriori) frequent itemset mining over an :class:`~arminer.transactions.ItemIndex`."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from fractions import Fraction
from typing import TYPE_CHECKING

from . import metrics
from ._core import run_partitioned
from ._validation import check_fraction, check_max_len, check_n_jobs
from .exceptions import InvalidParameterError, InvariantViolationError

if TYPE_CHECKING:
    from .transactions import ItemIndex

logger = logging.getLogger(__name__)

# (sorted item ids, tidset) of one frequent itemset of the current level
_Entry = tuple[tuple[int, ...], frozenset[int]]
# candidate ids plus the tidsets of the two parents it was joined from
_Candidate = tuple[tuple[int, ...], frozenset[int], frozenset[int]]


@dataclass(frozen=True)
class Itemset:
    """A frequent itemset: sorted item ids plus its exact support."""

    items: tuple[int, ...]
    support_count: int
    support: float

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[int]:
        return iter(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def labels(self, index: ItemIndex) -> tuple[str, ...]:
        return index.labels(self.items)


def min_count_for(min_support: float, total: int) -> int:
    """Smallest support count whose fraction ``count / total`` reaches *min_support*."""
    count = max(1, math.ceil(Fraction(min_support) * total))
    # float division may round a count just below the exact boundary up to min_support
    while count > 1 and (count - 1) / total >= min_support:
        count -= 1
    return count


def generate_candidates(level: Sequence[tuple[int, ...]]) -> list[tuple[int, ...]]:
    """Join step: candidates of size k+1 from the sorted frequent k-itemsets in *level*.

    Two itemsets are joined only when they share their first k-1 items, and a
    candidate is kept only when every k-subset is in *level*.
    """
    positions = {items: i for i, items in enumerate(level)}
    return [items for items, _, _ in _join(level, positions)]


def _join(
    level: Sequence[tuple[int, ...]],
    known: dict[tuple[int, ...], int],
) -> Iterator[tuple[tuple[int, ...], int, int]]:
    """Yield ``(candidate, left, right)`` in lexicographic candidate order.

    *left* and *right* are the positions in *level* of the two parents.
    """
    n = len(level)
    start = 0
    while start < n:
        prefix = level[start][:-1]
        stop = start + 1
        while stop < n and level[stop][:-1] == prefix:
            stop += 1
        for i in range(start, stop):
            for j in range(i + 1, stop):
                candidate = level[i] + level[j][-1:]
                if _all_subsets_known(candidate, known):
                    yield candidate, i, j
        start = stop


def _all_subsets_known(candidate: tuple[int, ...], known: dict[tuple[int, ...], int]) -> bool:
    # dropping either of the last two items gives a parent, which is known
    for drop in range(len(candidate) - 2):
        if candidate[:drop] + candidate[drop + 1 :] not in known:
            return False
    return True


def mine(
    index: ItemIndex,
    total_transactions: int,
    min_support: float,
    max_len: int | None = None,
    n_jobs: int = 1,
) -> list[Itemset]:
    """Find every itemset whose support reaches *min_support*.

    Parameters
    ----------
    index : ItemIndex
        Inverted index built by :func:`arminer.build`.
    total_transactions : int
        Number of transactions support fractions are computed against
        (normally ``index.n_transactions``).
    min_support : float
        Minimum support in ``(0, 1]``.
    max_len : int | None, default=None
        Stop after itemsets of this size.  ``None`` means no limit.
    n_jobs : int, default=1
        Worker threads used to count the candidates of one level.

    Returns
    -------
    list[Itemset]
        Ordered by size, then lexicographically by item ids.

    Raises
    ------
    InvalidParameterError
        If *min_support* is outside ``(0, 1]``, *max_len* or *n_jobs* is not a
        positive integer, or *total_transactions* is smaller than the number of
        indexed transactions.
    """
    min_support = check_fraction("min_support", min_support)
    max_len = check_max_len(max_len)
    n_jobs = check_n_jobs(n_jobs)

    if total_transactions < index.n_transactions:
        raise InvalidParameterError(
            f"`total_transactions` ({total_transactions}) is smaller than the "
            f"{index.n_transactions} indexed transactions."
        )
    if total_transactions == 0 or index.n_items == 0:
        return []

    min_count = min_count_for(min_support, total_transactions)

    level: list[_Entry] = [
        ((item_id,), index.posting(item_id))
        for item_id in range(index.n_items)
        if len(index.posting(item_id)) >= min_count
    ]

    result: list[Itemset] = []
    k = 1
    while level:
        logger.debug("level %d: %d frequent itemsets", k, len(level))
        result.extend(
            Itemset(items, len(tids), metrics.support(len(tids), total_transactions)) for items, tids in level
        )
        if max_len is not None and k >= max_len:
            break
        k += 1

        itemsets = [items for items, _ in level]
        positions = {items: i for i, items in enumerate(itemsets)}
        candidates: list[_Candidate] = [
            (candidate, level[i][1], level[j][1]) for candidate, i, j in _join(itemsets, positions)
        ]
        logger.debug("level %d: %d candidates after pruning", k, len(candidates))

        level = run_partitioned(_counter(k, min_count), candidates, n_jobs)

    return result


def _counter(k: int, min_count: int):
    def count(chunk: Sequence[_Candidate]) -> list[_Entry]:
        kept: list[_Entry] = []
        for items, left, right in chunk:
            if len(items) != k:
                raise InvariantViolationError(f"candidate {items} has size {len(items)}, expected {k}")
            tids = left & right
            if len(tids) > min(len(left), len(right)):
                raise InvariantViolationError(f"candidate {items} counted above the support of its parents")
            if len(tids) >= min_count:
                kept.append((items, tids))
        return kept

    return count
