"""
stepchain Test Fixtures

Shared fixtures and handler factories for all stepchain tests.
"""

import asyncio
from typing import Any

import pytest

from stepchain import StepContext
from stepchain.config import Config, set_config
from stepchain.utils.logging import configure_logging


# ══════════════════════════════════════════════════════════════════════════════
#                           CORE FIXTURES
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(scope="session", autouse=True)
def structured_logging():
    """Route structlog through stdlib logging so caplog sees chain logs."""
    configure_logging(level="DEBUG", include_timestamp=False)


@pytest.fixture(autouse=True)
def default_config():
    """Give every test a fresh default configuration."""
    set_config(Config())
    yield
    set_config(Config())


# ══════════════════════════════════════════════════════════════════════════════
#                           HANDLER FACTORIES
# ══════════════════════════════════════════════════════════════════════════════


class RecordingHandler:
    """
    Step handler that records every context it receives.

    Each stage appends its index to ``state["order"]`` when it finishes, then
    completes with ``ctx.key``. ``delays`` maps a stage index to the seconds it
    waits before finishing.
    """

    def __init__(self, delays: dict[int, float] | None = None):
        self.delays = delays or {}
        self.contexts: list[StepContext] = []

    @property
    def calls(self) -> int:
        return len(self.contexts)

    @property
    def keys(self) -> list[str]:
        return [ctx.key for ctx in self.contexts]

    def __call__(self, ctx: StepContext) -> None:
        self.contexts.append(ctx)
        delay = self.delays.get(ctx.index, 0)

        def finish():
            ctx.state.setdefault("order", []).append(ctx.index)
            ctx.complete(ctx.key)

        if delay:
            asyncio.get_running_loop().call_later(delay, finish)
        else:
            finish()


class ManualHandler:
    """Step handler that never completes on its own; tests call ``release``."""

    def __init__(self):
        self.contexts: list[StepContext] = []

    def __call__(self, ctx: StepContext) -> None:
        self.contexts.append(ctx)

    def release(self, position: int = -1, *values: Any) -> None:
        self.contexts[position].complete(*values)


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def manual_handler() -> ManualHandler:
    return ManualHandler()


@pytest.fixture
def make_recording_handler():
    """Factory for recording handlers with per-stage delays."""
    def _make(delays: dict[int, float] | None = None) -> RecordingHandler:
        return RecordingHandler(delays)
    return _make
