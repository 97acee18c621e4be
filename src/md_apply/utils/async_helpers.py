"""Async utility functions and the application exception hierarchy.

This module provides:
- Custom exceptions for error handling
- Keyed fan-out of independent per-file coroutines
- Thread offloading for blocking I/O

See DESIGN.md for the error handling strategy.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Iterable
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


# =============================================================================
# Custom Exceptions
# =============================================================================


class ApplyError(Exception):
    """Base exception for all md-apply errors."""


class InputError(ApplyError):
    """Failed to acquire the markdown input."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class FileInputError(InputError):
    """Failed to read the markdown input file."""


class ClipboardError(InputError):
    """Failed to read usable text from the clipboard."""


# =============================================================================
# Fan-out
# =============================================================================


async def gather_keyed(
    items: Iterable[T],
    key: Callable[[T], K],
    worker: Callable[[T], Awaitable[R]],
) -> dict[K, R]:
    """Run ``worker`` for every item concurrently and join before returning.

    Results are keyed by ``key(item)``. Items sharing a key are all run;
    the last one in input order wins the slot. Exceptions propagate from
    ``asyncio.gather``, so workers are expected to turn per-item failures
    into result values themselves.

    Args:
        items: Items to process.
        key: Function mapping an item to its result key.
        worker: Coroutine function run once per item.

    Returns:
        Mapping of key to the worker's result.
    """
    item_list = list(items)
    results = await asyncio.gather(*(worker(item) for item in item_list))
    return {key(item): result for item, result in zip(item_list, results, strict=True)}


async def run_blocking(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a blocking callable in the default thread pool."""
    return await asyncio.to_thread(func, *args, **kwargs)

