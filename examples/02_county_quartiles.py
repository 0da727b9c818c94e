"""
arminer — Rules over quartile-labelled counties
===============================================

Each county carries the quartile of a few indicators. Rules are restricted
so that the consequent is always a poverty quartile, and ranked by lift.
"""

import numpy as np
import pandas as pd

from arminer import AppearanceConstraint, Apriori

rng = np.random.default_rng(0)
n = 400

# Correlated indicators: unemployment tracks poverty, nitrate is noise
poverty = rng.integers(1, 5, n)
unemployment = np.clip(poverty + rng.integers(-1, 2, n), 1, 4)
nitrate = rng.integers(1, 5, n)

quartiles = pd.DataFrame(
    {
        "fips": [f"{i:05d}" for i in range(n)],
        "poverty_rate": [f"Q{q}" for q in poverty],
        "unemployment": [f"Q{q}" for q in unemployment],
        "nitrate": [f"Q{q}" for q in nitrate],
    }
)

constraint = AppearanceConstraint.only(consequent=["poverty_rate=Q1", "poverty_rate=Q4"])

model = Apriori(min_support=0.05, min_confidence=0.4, constraint=constraint, verbose=1).fit(
    quartiles, layout="attributes", key_col="fips"
)

rules = model.association_rules_.sort_values("lift", ascending=False)
cols = ["antecedents", "consequents", "support", "confidence", "lift", "conviction"]
print(rules[cols].head(10).to_string(index=False))

# Same itemsets, different thresholds: no re-mining needed
strict = model.association_rules(min_confidence=0.6)
print(f"\n{len(strict)} rules reach confidence 0.6")
