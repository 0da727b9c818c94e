from __future__ import annotations

import importlib
import importlib.util
import types
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd


def import_polars(feature: str) -> types.ModuleType:
    """Import Polars, or raise an ImportError naming the ``polars`` extra and *feature*."""
    if importlib.util.find_spec("polars") is None:
        raise ImportError(
            f"Missing optional dependency 'polars'. {feature} "
            "Install it with `pip install arminer[polars]`."
        )
    return importlib.import_module("polars")


def to_pandas(data: Any) -> pd.DataFrame | Any:
    """Coerce Polars / PyArrow tables to pandas; return everything else unchanged."""
    mod = getattr(type(data), "__module__", "") or ""
    name = type(data).__name__

    # PyArrow Table → pandas
    if name == "Table" and mod.startswith("pyarrow"):
        return data.to_pandas()

    if name == "DataFrame" and mod.startswith("polars"):
        return data.to_pandas()

    return data
