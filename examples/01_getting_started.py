"""
arminer — Getting Started
=========================

The simplest possible example: mine frequent itemsets from a
one-hot encoded pandas DataFrame, then generate association rules.
"""

import pandas as pd

from arminer import apriori, Apriori

# A small market-basket dataset (5 transactions, 5 items)
data = {
    "bread": [1, 1, 0, 1, 1],
    "butter": [1, 0, 1, 1, 0],
    "milk": [1, 1, 1, 0, 1],
    "eggs": [0, 1, 1, 0, 1],
    "cheese": [0, 0, 1, 0, 0],
}
df = pd.DataFrame(data).astype(bool)

print("Input DataFrame:")
print(df.to_string())
print()

# ── 1. Mine frequent itemsets ───────────────────────────────────────────────
freq = apriori(df, min_support=0.4, layout="onehot")

print("Frequent itemsets (min_support=0.4):")
print(freq.sort_values("support", ascending=False).to_string(index=False))
print()

# ── 2. Generate association rules ───────────────────────────────────────────
model = Apriori(min_support=0.4, min_confidence=0.6).fit(df, layout="onehot")
rules = model.association_rules_

print("Association rules (confidence ≥ 0.6):")
cols = ["antecedents", "consequents", "support", "confidence", "lift"]
print(rules[cols].sort_values("lift", ascending=False).to_string(index=False))
