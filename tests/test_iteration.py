"""Tests for the generic iterate() driver."""

import inspect

import pytest

from pubflow.pipeline.iteration import iterate


def counting(limit):
    """Iteration producing n+1 then n+2, recording when each is awaited."""
    awaited = []

    def iteration(n):
        async def value(v):
            awaited.append(v)
            return v

        return [value(n + 1), value(n + 2)]

    return iteration, (lambda n: n >= limit), awaited


class TestIterate:
    @pytest.mark.asyncio
    async def test_returns_start_when_condition_already_holds(self):
        calls = []

        def iteration(n):
            calls.append(n)
            return []

        result = await iterate(iteration, lambda n: True, calls.append, 7)

        assert result == 7
        assert calls == []

    @pytest.mark.asyncio
    async def test_values_are_handled_in_order(self):
        iteration, condition, awaited = counting(6)
        seen = []

        result = await iterate(iteration, condition, seen.append, 0)

        assert result == 6
        assert seen == [1, 2, 3, 4, 5, 6]
        assert awaited == seen

    @pytest.mark.asyncio
    async def test_condition_only_checked_between_rounds(self):
        iteration, _, _ = counting(0)
        seen = []

        # Condition is true after the first value but the round still finishes
        result = await iterate(iteration, lambda n: n >= 1, seen.append, 0)

        assert result == 2
        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_async_handler_is_awaited(self):
        iteration, condition, _ = counting(4)
        seen = []

        async def handler(n):
            seen.append(n)

        await iterate(iteration, condition, handler, 0)

        assert seen == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_failing_handler_closes_rest_of_round(self):
        started = []

        async def value(v):
            started.append(v)
            return v

        pending = []

        def iteration(n):
            round_ = [value(n + 1), value(n + 2)]
            pending.extend(round_)
            return round_

        def handler(n):
            raise ValueError("handler broke")

        with pytest.raises(ValueError, match="handler broke"):
            await iterate(iteration, lambda n: False, handler, 0)

        assert started == [1]
        # The unawaited second coroutine was closed, not left pending
        assert inspect.getcoroutinestate(pending[1]) == inspect.CORO_CLOSED
