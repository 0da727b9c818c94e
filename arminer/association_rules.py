from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from . import metrics
from ._core import run_partitioned
from ._validation import check_fraction, check_n_jobs
from .apriori import Itemset, generate_candidates
from .exceptions import InvalidParameterError, InvariantViolationError

if TYPE_CHECKING:
    from .transactions import ItemIndex

logger = logging.getLogger(__name__)


def _label_set(name: str, labels: Iterable[str] | None) -> frozenset[str] | None:
    if labels is None:
        return None
    if isinstance(labels, (str, bytes)):
        raise InvalidParameterError(f"`{name}` must be a collection of item labels, not a single string.")
    return frozenset(str(label) for label in labels)


@dataclass(frozen=True)
class AppearanceConstraint:
    """Which items may appear on each side of a rule.

    ``antecedent`` / ``consequent`` are allow-lists of item labels (``None``
    allows every item); labels in ``excluded`` may appear on neither side.
    The default instance places no restriction at all.

    Examples
    --------
    Rules that predict the poverty quartile from anything else:

    >>> AppearanceConstraint.only(consequent=["poverty=Q1", "poverty=Q4"])

    Rules that never mention the county's state:

    >>> AppearanceConstraint.excluding(["state=CA", "state=TX"])
    """

    antecedent: frozenset[str] | None = None
    consequent: frozenset[str] | None = None
    excluded: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "antecedent", _label_set("antecedent", self.antecedent))
        object.__setattr__(self, "consequent", _label_set("consequent", self.consequent))
        object.__setattr__(self, "excluded", _label_set("excluded", self.excluded) or frozenset())

    @classmethod
    def only(
        cls,
        antecedent: Iterable[str] | None = None,
        consequent: Iterable[str] | None = None,
    ) -> AppearanceConstraint:
        return cls(antecedent=antecedent, consequent=consequent)  # type: ignore[arg-type]

    @classmethod
    def excluding(cls, labels: Iterable[str]) -> AppearanceConstraint:
        return cls(excluded=labels)  # type: ignore[arg-type]

    @property
    def is_unconstrained(self) -> bool:
        return self.antecedent is None and self.consequent is None and not self.excluded

    def resolve(self, index: ItemIndex) -> tuple[frozenset[int] | None, frozenset[int] | None]:
        """Allowed item ids for (antecedent, consequent); ``None`` means all items.

        Labels that do not occur in *index* are ignored.
        """
        excluded = frozenset(index.ids(self.excluded, strict=False))

        def _side(allowed: frozenset[str] | None) -> frozenset[int] | None:
            if allowed is None:
                return frozenset(range(index.n_items)) - excluded if excluded else None
            return frozenset(index.ids(allowed, strict=False)) - excluded

        return _side(self.antecedent), _side(self.consequent)


@dataclass(frozen=True)
class Rule:
    """An association rule ``antecedent ⇒ consequent`` with its interest measures."""

    antecedent: Itemset
    consequent: Itemset
    antecedent_labels: tuple[str, ...]
    consequent_labels: tuple[str, ...]
    support_count: int
    support: float
    confidence: float
    lift: float
    leverage: float
    conviction: float
    zhangs_metric: float
    jaccard: float
    certainty: float
    kulczynski: float

    @property
    def antecedent_support(self) -> float:
        return self.antecedent.support

    @property
    def consequent_support(self) -> float:
        return self.consequent.support

    @property
    def items(self) -> tuple[int, ...]:
        return tuple(sorted(self.antecedent.items + self.consequent.items))

    def __str__(self) -> str:
        lhs = ", ".join(self.antecedent_labels)
        rhs = ", ".join(self.consequent_labels)
        return f"{{{lhs}}} => {{{rhs}}}"


class _RuleBuilder:
    """Enumerates the rules of one frequent itemset at a time.

    Holds only read-only state so one instance can serve several threads.
    """

    def __init__(
        self,
        cache: dict[tuple[int, ...], Itemset],
        index: ItemIndex,
        total: int,
        min_confidence: float,
        lhs_allowed: frozenset[int] | None,
        rhs_allowed: frozenset[int] | None,
    ) -> None:
        self.cache = cache
        self.index = index
        self.total = total
        self.min_confidence = min_confidence
        self.lhs_allowed = lhs_allowed
        self.rhs_allowed = rhs_allowed

    def __call__(self, chunk: Sequence[Itemset]) -> list[Rule]:
        rules: list[Rule] = []
        for itemset in chunk:
            rules.extend(self.rules_for(itemset))
        return rules

    def _antecedent(self, items: tuple[int, ...], source: Itemset) -> Itemset:
        antecedent = self.cache.get(items)
        if antecedent is None:
            raise InvariantViolationError(
                f"antecedent {items} of frequent itemset {source.items} has no cached support"
            )
        if antecedent.support_count < source.support_count:
            raise InvariantViolationError(
                f"antecedent {items} has support count {antecedent.support_count}, "
                f"below the {source.support_count} of its superset {source.items}"
            )
        return antecedent

    def _consequent(self, items: tuple[int, ...]) -> Itemset:
        consequent = self.cache.get(items)
        if consequent is None:
            count = self.index.support_count(items)
            consequent = Itemset(items, count, metrics.support(count, self.total))
        return consequent

    def rules_for(self, itemset: Itemset) -> list[Rule]:
        """Rules from *itemset*, grown level-wise over the consequent size.

        A consequent is extended only if its own rule reached the confidence
        threshold and all its items may appear on the consequent side; both
        properties carry over from a consequent to its subsets, so every
        skipped split would have failed anyway.
        """
        items = itemset.items
        rules: list[Rule] = []
        consequents: list[tuple[int, ...]] = [(i,) for i in items]
        size = 1
        while consequents:
            survivors = []
            for cons_items in consequents:
                if self.rhs_allowed is not None and not self.rhs_allowed.issuperset(cons_items):
                    continue
                ant_items = tuple(i for i in items if i not in cons_items)
                antecedent = self._antecedent(ant_items, itemset)
                conf = metrics.confidence(itemset.support_count, antecedent.support_count)
                if conf < self.min_confidence:
                    continue
                survivors.append(cons_items)
                if self.lhs_allowed is None or self.lhs_allowed.issuperset(ant_items):
                    rules.append(self._make_rule(itemset, antecedent, self._consequent(cons_items), conf))
            size += 1
            if size >= len(items):
                break
            consequents = generate_candidates(survivors)
        return rules

    def _make_rule(self, itemset: Itemset, antecedent: Itemset, consequent: Itemset, conf: float) -> Rule:
        return Rule(
            antecedent=antecedent,
            consequent=consequent,
            antecedent_labels=self.index.labels(antecedent.items),
            consequent_labels=self.index.labels(consequent.items),
            support_count=itemset.support_count,
            support=itemset.support,
            confidence=conf,
            lift=metrics.lift(conf, consequent.support),
            leverage=metrics.leverage(itemset.support, antecedent.support, consequent.support),
            conviction=metrics.conviction(conf, consequent.support),
            zhangs_metric=metrics.zhangs_metric(itemset.support, antecedent.support, consequent.support),
            jaccard=metrics.jaccard(itemset.support, antecedent.support, consequent.support),
            certainty=metrics.certainty(conf, consequent.support),
            kulczynski=metrics.kulczynski(itemset.support, antecedent.support, consequent.support),
        )


def _mined_total(frequent: Sequence[Itemset], total_transactions: int | None, index: ItemIndex) -> int:
    """Transaction count behind the supports of *frequent*.

    Every itemset implies a total of ``support_count / support``; they must
    all agree with each other and with *total_transactions* when given.
    """
    implied = {round(s.support_count / s.support) for s in frequent if s.support > 0}
    if len(implied) > 1:
        raise InvariantViolationError(f"frequent itemsets were counted against different totals {sorted(implied)}")
    if total_transactions is not None:
        total = int(total_transactions)
        if implied and implied != {total}:
            raise InvariantViolationError(
                f"`total_transactions` is {total} but the itemsets were mined over {implied.pop()} transactions"
            )
        return total
    return implied.pop() if implied else index.n_transactions


def generate(
    frequent: Sequence[Itemset],
    index: ItemIndex,
    min_confidence: float,
    constraint: AppearanceConstraint | None = None,
    n_jobs: int = 1,
    total_transactions: int | None = None,
) -> list[Rule]:
    """Derive association rules from mined frequent itemsets.

    Parameters
    ----------
    frequent : Sequence[Itemset]
        Output of :func:`arminer.mine`.  Every antecedent must be present
        (guaranteed by downward closure for a complete mining result).
    index : ItemIndex
        The index the itemsets were mined from; used for labels and for the
        support of consequents missing from *frequent*.
    min_confidence : float
        Minimum confidence in ``(0, 1]``.
    constraint : AppearanceConstraint | None, default=None
        Restrict the items allowed on each side.  ``None`` allows everything.
    n_jobs : int, default=1
        Worker threads; itemsets are split into contiguous chunks.
    total_transactions : int | None, default=None
        Transaction count the supports are relative to.  Defaults to the
        count implied by *frequent* (``support_count / support``), or
        ``index.n_transactions`` when *frequent* is empty.  Consequents
        counted from *index* use the same total as the cached supports.

    Returns
    -------
    list[Rule]
        Rules in the order of their source itemsets; rules of one itemset are
        ordered by consequent size, then by consequent item ids.

    Raises
    ------
    InvalidParameterError
        If *min_confidence* is outside ``(0, 1]`` or *n_jobs* is invalid.
    InvariantViolationError
        If an antecedent's support is missing from *frequent*, or the itemsets
        disagree with each other or with *total_transactions* on the total.
    """
    min_confidence = check_fraction("min_confidence", min_confidence)
    n_jobs = check_n_jobs(n_jobs)
    constraint = constraint if constraint is not None else AppearanceConstraint()
    total = _mined_total(frequent, total_transactions, index)

    lhs_allowed, rhs_allowed = constraint.resolve(index)
    if (lhs_allowed is not None and not lhs_allowed) or (rhs_allowed is not None and not rhs_allowed):
        logger.debug("constraint leaves no admissible item on one side; no rules")
        return []

    cache = {itemset.items: itemset for itemset in frequent}
    sources = [itemset for itemset in frequent if len(itemset) >= 2]

    builder = _RuleBuilder(cache, index, total, min_confidence, lhs_allowed, rhs_allowed)
    rules = run_partitioned(builder, sources, n_jobs)
    logger.debug("generated %d rules from %d itemsets", len(rules), len(sources))
    return rules
