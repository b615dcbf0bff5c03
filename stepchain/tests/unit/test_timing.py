"""
Unit Tests for stepchain Timing Utilities
"""

import asyncio
import time

import pytest

from stepchain.utils.timing import AsyncTimer, Timer


class TestTimer:
    """Tests for Timer / AsyncTimer."""

    def test_measures_block(self):
        with Timer() as timer:
            time.sleep(0.01)

        assert timer.elapsed_ms >= 10
        first = timer.elapsed_ms
        time.sleep(0.005)
        assert timer.elapsed_ms == first

    def test_elapsed_while_running(self):
        with Timer() as timer:
            assert timer.elapsed_ms >= 0
            assert timer.end_time == 0

    @pytest.mark.asyncio
    async def test_async_timer(self):
        async with AsyncTimer() as timer:
            await asyncio.sleep(0.01)

        assert timer.elapsed_ms >= 10
