"""
stepchain Timing Utilities

Timers used to measure stage and request durations.
"""

import time


class Timer:
    """
    Context manager for timing code blocks.

    Usage:
        with Timer() as t:
            do_something()
        print(f"Took {t.elapsed_ms}ms")
    """

    def __init__(self):
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def elapsed_ms(self) -> float:
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.end_time = time.perf_counter()


class AsyncTimer(Timer):
    """
    Async context manager for timing code blocks.

    Usage:
        async with AsyncTimer() as t:
            await client.get(url)
    """

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, *args):
        self.__exit__(*args)
