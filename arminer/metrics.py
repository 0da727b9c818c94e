"""Interest measures for itemsets and association rules.

All functions are pure. Denominators that can only be zero through a defect
upstream (an antecedent that was never verified frequent, an empty database)
raise :class:`~arminer.exceptions.InvariantViolationError` instead of returning
``inf`` or ``nan``.
"""

from __future__ import annotations

import math

from .exceptions import InvariantViolationError


def support(support_count: int, total: int) -> float:
    """Fraction of the *total* transactions that contain an itemset."""
    if total <= 0:
        raise InvariantViolationError(f"support requested over {total} transactions")
    if support_count < 0 or support_count > total:
        raise InvariantViolationError(f"support count {support_count} outside [0, {total}]")
    return support_count / total


def confidence(support_union: float, support_antecedent: float) -> float:
    """``support(A ∪ C) / support(A)``."""
    if support_antecedent <= 0:
        raise InvariantViolationError(
            f"confidence requested for an antecedent with support {support_antecedent}"
        )
    return support_union / support_antecedent


def lift(confidence: float, support_consequent: float) -> float:
    """``confidence(A ⇒ C) / support(C)``; 1.0 means independence."""
    if support_consequent <= 0:
        raise InvariantViolationError(
            f"lift requested for a consequent with support {support_consequent}"
        )
    return confidence / support_consequent


def leverage(support_union: float, support_antecedent: float, support_consequent: float) -> float:
    """Observed minus expected co-occurrence, ``support(A ∪ C) - support(A) * support(C)``."""
    return support_union - support_antecedent * support_consequent


def conviction(confidence: float, support_consequent: float) -> float:
    """``(1 - support(C)) / (1 - confidence)``.

    A rule that never fails (confidence 1) has infinite conviction.
    """
    if confidence >= 1.0:
        return math.inf
    return (1.0 - support_consequent) / (1.0 - confidence)


def zhangs_metric(support_union: float, support_antecedent: float, support_consequent: float) -> float:
    """Zhang's association measure in ``[-1, 1]``.

    Zero when the antecedent occurs in every transaction, where association
    is undefined.
    """
    denominator = max(
        support_union * (1.0 - support_antecedent),
        support_antecedent * (support_consequent - support_union),
    )
    if denominator == 0:
        return 0.0
    return leverage(support_union, support_antecedent, support_consequent) / denominator


def jaccard(support_union: float, support_antecedent: float, support_consequent: float) -> float:
    """``support(A ∪ C) / support(A or C)``."""
    either = support_antecedent + support_consequent - support_union
    if either <= 0:
        raise InvariantViolationError(f"jaccard requested for rule sides with combined support {either}")
    return support_union / either


def certainty(confidence: float, support_consequent: float) -> float:
    """Certainty factor ``(confidence - support(C)) / (1 - support(C))``; 0 for a universal consequent."""
    if support_consequent >= 1.0:
        return 0.0
    return (confidence - support_consequent) / (1.0 - support_consequent)


def kulczynski(support_union: float, support_antecedent: float, support_consequent: float) -> float:
    """Mean of the confidences of ``A ⇒ C`` and ``C ⇒ A``."""
    return (
        confidence(support_union, support_antecedent) + confidence(support_union, support_consequent)
    ) / 2.0
