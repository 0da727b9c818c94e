"""Parameter and input validation shared by the mining entry points."""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidParameterError

if TYPE_CHECKING:
    import pandas as pd


def check_fraction(name: str, value: Any) -> float:
    """Return *value* as a float, or raise if it is not a number in ``(0, 1]``."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"`{name}` must be a number within the interval `(0, 1]`. Got {value!r}.")
    value = float(value)
    # NaN fails both comparisons
    if not (0.0 < value <= 1.0):
        raise InvalidParameterError(f"`{name}` must be a positive number within the interval `(0, 1]`. Got {value}.")
    return value


def check_max_len(max_len: Any) -> int | None:
    if max_len is None:
        return None
    if isinstance(max_len, bool) or not isinstance(max_len, numbers.Integral) or max_len < 1:
        raise InvalidParameterError(f"`max_len` must be a positive integer or None. Got {max_len!r}.")
    return int(max_len)


def check_n_jobs(n_jobs: Any) -> int:
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, numbers.Integral) or n_jobs < 1:
        raise InvalidParameterError(f"`n_jobs` must be a positive integer. Got {n_jobs!r}.")
    return int(n_jobs)


def valid_input_check(df: pd.DataFrame) -> None:
    """Validate a one-hot / boolean DataFrame before turning it into transactions.

    Parameters
    ----------
    df:
        Input DataFrame.  Allowed values: 0/1 or True/False.
    """
    import numpy as np
    import pandas as pd

    if df.size == 0:
        return

    # Fast path: all bool columns
    if df.dtypes.apply(pd.api.types.is_bool_dtype).all():
        return

    if pd.isna(df).any().any():
        raise InvalidParameterError("NaN values are not permitted in a one-hot DataFrame.")

    if hasattr(df, "sparse"):
        values = df.sparse.to_dense().to_numpy()
    else:
        values = df.values

    idxs = np.where((values != 1) & (values != 0))
    if len(idxs[0]) > 0:
        val = values[tuple(loc[0] for loc in idxs)]
        raise InvalidParameterError("The allowed values for a DataFrame are True, False, 0, 1. Found value %s" % (val,))
