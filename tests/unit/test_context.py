"""Tests for OperationContext."""

import asyncio
import time

import pytest

from reconciler.context import OperationContext


class TestOperationContext:
    """Tests for deadlines and cancellation."""

    @pytest.mark.asyncio
    async def test_unbounded(self):
        ctx = OperationContext()
        assert ctx.remaining() is None
        assert not ctx.expired
        assert not ctx.cancelled

    @pytest.mark.asyncio
    async def test_with_timeout_narrows(self):
        parent = OperationContext.with_deadline_in(10)
        child = parent.with_timeout(3600)
        assert child.deadline == parent.deadline

        narrower = parent.with_timeout(1)
        assert narrower.deadline < parent.deadline

    @pytest.mark.asyncio
    async def test_with_timeout_none_keeps_deadline(self):
        parent = OperationContext.with_deadline_in(5)
        assert parent.with_timeout(None).deadline == parent.deadline

    @pytest.mark.asyncio
    async def test_expired(self):
        ctx = OperationContext(time.monotonic() - 1)
        assert ctx.expired
        assert ctx.remaining() == 0.0

    @pytest.mark.asyncio
    async def test_cancel_propagates_to_children(self):
        parent = OperationContext()
        child = parent.with_timeout(60)

        parent.cancel()

        assert child.cancelled

    @pytest.mark.asyncio
    async def test_sleep_completes(self):
        ctx = OperationContext()
        assert await ctx.sleep(0.01) is False

    @pytest.mark.asyncio
    async def test_sleep_wakes_on_cancel(self):
        ctx = OperationContext()
        loop = asyncio.get_running_loop()
        loop.call_later(0.02, ctx.cancel)

        started = time.monotonic()
        assert await ctx.sleep(10) is True
        assert time.monotonic() - started < 5

    @pytest.mark.asyncio
    async def test_sleep_after_cancel(self):
        ctx = OperationContext()
        ctx.cancel()
        assert await ctx.sleep(10) is True
