"""
iterate(): generic fixpoint driver.

Repeatedly asks ``iteration`` for the awaitables of the next round,
awaits them one after the other, hands each value to ``handler``, and
stops as soon as ``condition`` holds.  Nothing is run concurrently.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")


def _close(awaitables: list[Awaitable[Any]]) -> None:
    """Close coroutines of an abandoned round so they are never left pending."""
    for awaitable in awaitables:
        if inspect.iscoroutine(awaitable):
            awaitable.close()


async def iterate(
    iteration: Callable[[T], Iterable[Awaitable[T]]],
    condition: Callable[[T], bool],
    handler: Callable[[T], Any],
    start: T,
) -> T:
    """
    Drive ``start`` through ``iteration`` until ``condition`` is true.

    Args:
        iteration: Value → ordered awaitables producing successive values.
        condition: Stop predicate, checked before every round (including
                   the first, so a value that already satisfies it is
                   returned untouched).
        handler: Called with every produced value, in order.  May be a
                 coroutine function.
        start: The starting value.

    Returns:
        The last value produced before ``condition`` held.
    """
    current = start
    while not condition(current):
        remaining = list(iteration(current))
        try:
            while remaining:
                current = await remaining.pop(0)
                result = handler(current)
                if inspect.isawaitable(result):
                    await result
        finally:
            _close(remaining)
    return current
