from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def _chunks(items: Sequence[T], n_chunks: int) -> list[Sequence[T]]:
    """Split *items* into at most *n_chunks* contiguous, near-equal slices."""
    n_chunks = max(1, min(n_chunks, len(items)))
    size, extra = divmod(len(items), n_chunks)
    out = []
    start = 0
    for i in range(n_chunks):
        stop = start + size + (1 if i < extra else 0)
        out.append(items[start:stop])
        start = stop
    return out


def run_partitioned(
    func: Callable[[Sequence[T]], list[R]],
    items: Sequence[T],
    n_jobs: int = 1,
) -> list[R]:
    """Apply *func* to contiguous chunks of *items* and concatenate the results.

    With ``n_jobs > 1`` the chunks run on a ``ThreadPoolExecutor``.  Every
    worker returns its own list and the lists are joined in chunk order, so
    the output is identical to ``func(items)`` whatever the scheduling.
    Exceptions raised by a worker propagate to the caller.
    """
    if n_jobs <= 1 or len(items) < 2:
        return func(items)

    from concurrent.futures import ThreadPoolExecutor

    parts = _chunks(items, n_jobs)
    with ThreadPoolExecutor(max_workers=len(parts)) as pool:
        futures = [pool.submit(func, part) for part in parts]
        results = [future.result() for future in futures]

    merged: list[R] = []
    for part in results:
        merged.extend(part)
    return merged
