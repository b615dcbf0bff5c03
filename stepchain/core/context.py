"""
stepchain Step Context

Objects handed to step handlers and return-value handlers:

- StepContext: built fresh for every stage, passed once to the step handler
- ReturnContext: what the return-value handler sees at call time
- CompletionSignal: the single-use callback that lets the chain advance
- ChainTail: awaitable handle on the chain's pending operation
- ReturnOverride: return-value handler result that replaces the chain
"""

import asyncio
import threading
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stepchain.core.errors import CompletionError, ReservedKeyError
from stepchain.utils.logging import ChainLogger

if TYPE_CHECKING:
    from stepchain.core.proxy import ChainProxy

__all__ = [
    "ChainTail",
    "CompletionSignal",
    "ReturnContext",
    "ReturnOverride",
    "StepContext",
]


class ChainTail:
    """
    Awaitable view of a chain's pending operation.

    Awaiting a tail waits for every step queued before the tail was read and
    evaluates to the values passed to the last stage's completion signal.
    The wait is shielded, so cancelling the awaiting coroutine leaves the
    queued stages running.

    Usage:
        tail = chain[""]
        values = await tail
    """

    __slots__ = ("future", "chain_name")

    def __init__(self, future: asyncio.Future, chain_name: str | None = None):
        self.future = future
        self.chain_name = chain_name

    def __await__(self) -> Generator[Any, None, tuple]:
        return asyncio.shield(self.future).__await__()

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise ReservedKeyError(self.chain_name)

    def done(self) -> bool:
        return self.future.done()

    def result(self) -> tuple:
        """Completion values of the tail stage (raises if not settled or failed)"""
        return self.future.result()

    def exception(self) -> BaseException | None:
        return self.future.exception()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ChainTail):
            return self.future is other.future
        return NotImplemented

    def __hash__(self) -> int:
        return id(self.future)

    def __repr__(self) -> str:
        if not self.future.done():
            status = "pending"
        elif self.future.cancelled():
            status = "cancelled"
        elif self.future.exception() is not None:
            status = "failed"
        else:
            status = "done"
        return f"ChainTail(chain={self.chain_name}, status={status})"


class CompletionSignal:
    """
    Single-use completion callback for one stage.

    Calling the signal resolves the stage with the given values, which become
    the next stage's ``prior_result``. ``fail(error)`` fails the stage instead.
    Only the first call has an effect; later calls are ignored with a warning,
    or raise CompletionError when strict completion is enabled.

    The signal may be called from any thread.
    """

    def __init__(
        self,
        future: asyncio.Future,
        key: str,
        index: int,
        logger: ChainLogger,
        strict: bool = False,
    ):
        self._future = future
        self._loop = future.get_loop()
        self._lock = threading.Lock()
        self._fired = False
        self.key = key
        self.index = index
        self.strict = strict
        self._logger = logger

    @property
    def called(self) -> bool:
        """Whether the stage has already been completed or failed"""
        return self._fired

    def __call__(self, *values: Any) -> None:
        if self._claim():
            self._dispatch(self._resolve, values)

    def fail(self, error: BaseException) -> None:
        """Fail the stage; the error propagates to every later stage and the tail"""
        if self._claim():
            self._dispatch(self._reject, error)

    def _claim(self) -> bool:
        with self._lock:
            if not self._fired:
                self._fired = True
                return True

        if self.strict:
            raise CompletionError(self.key, self.index, self._logger.chain_name)
        self._logger.duplicate_completion(self.key, self.index)
        return False

    def _dispatch(self, callback: Any, payload: Any) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            callback(payload)
        else:
            self._loop.call_soon_threadsafe(callback, payload)

    def _resolve(self, values: tuple) -> None:
        if not self._future.done():
            self._future.set_result(values)

    def _reject(self, error: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(error)

    def __repr__(self) -> str:
        return f"CompletionSignal(key={self.key!r}, index={self.index}, called={self._fired})"


@dataclass(frozen=True)
class StepContext:
    """Everything a step handler receives for one stage"""

    complete: CompletionSignal
    prior_result: tuple
    call_args: tuple
    call_kwargs: dict[str, Any]
    key: str
    index: int
    state: dict[str, Any] = field(repr=False)
    pending: ChainTail = field(repr=False)
    chain: "ChainProxy" = field(repr=False)


@dataclass(frozen=True)
class ReturnContext:
    """
    What the return-value handler receives right after a call is queued.

    Mirrors StepContext minus the completion signal and prior result, which do
    not exist yet. ``stage`` is the tail of the stage that was just queued.
    """

    call_args: tuple
    call_kwargs: dict[str, Any]
    key: str
    index: int
    state: dict[str, Any] = field(repr=False)
    pending: ChainTail = field(repr=False)
    stage: ChainTail = field(repr=False)
    chain: "ChainProxy" = field(repr=False)


@dataclass(frozen=True)
class ReturnOverride:
    """Returned from a return-value handler to replace what the call evaluates to"""

    return_value: Any
