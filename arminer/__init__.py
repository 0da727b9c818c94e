from .apriori import Itemset, mine
from .association_rules import AppearanceConstraint, Rule, generate
from .exceptions import (
    ArminerError,
    DuplicateEntityError,
    InvalidParameterError,
    InvariantViolationError,
)
from .export import itemsets_to_frame, rules_to_frame
from .model import Apriori, apriori
from .transactions import (
    ItemIndex,
    Transaction,
    TransactionStore,
    build,
    from_attributes,
    from_onehot,
    from_pandas,
    from_transactions,
)

__all__ = [
    "build",
    "mine",
    "generate",
    "from_transactions",
    "from_pandas",
    "from_onehot",
    "from_attributes",
    "itemsets_to_frame",
    "rules_to_frame",
    "Apriori",
    "apriori",
    "AppearanceConstraint",
    "Itemset",
    "ItemIndex",
    "Rule",
    "Transaction",
    "TransactionStore",
    "ArminerError",
    "DuplicateEntityError",
    "InvalidParameterError",
    "InvariantViolationError",
]
