"""
stepchain Chain Proxy

A ChainProxy turns every attribute access into a chainable step:

    chain = create_chain(handler)
    chain.connect("db").query("SELECT 1").close()
    await chain

Each call queues one stage after the chain's current pending operation. A
stage invokes the step handler once its predecessor has completed and does not
complete itself until the handler calls ``ctx.complete``. Stages therefore run
strictly one at a time, in the order the calls were issued.

The empty-string key is reserved: ``chain[""]`` returns the chain tail instead
of a step.
"""

import asyncio
import inspect
import itertools
import threading
from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from typing import Any

from stepchain.config import get_config
from stepchain.core.context import (
    ChainTail,
    CompletionSignal,
    ReturnContext,
    ReturnOverride,
    StepContext,
)
from stepchain.core.errors import ChainUsageError, CompletionError
from stepchain.utils.logging import ChainLogger
from stepchain.utils.timing import Timer

__all__ = [
    "ChainProxy",
    "StepFunction",
    "StepHandler",
    "ReturnValueHandler",
    "create_chain",
    "tail",
    "get_state",
    "is_chain",
]

TAIL_KEY = ""

StepHandler = Callable[[StepContext], Any]
ReturnValueHandler = Callable[[ReturnContext], Any]

_chain_ids = itertools.count(1)


def _as_values(value: Any) -> tuple:
    """Normalize an awaited initial result into prior-result form"""
    if value is None:
        return ()
    if isinstance(value, tuple):
        return value
    return (value,)


async def _adopt(awaitable: Awaitable[Any]) -> tuple:
    return _as_values(await awaitable)


class _ChainCore:
    """Sequencing machinery behind a ChainProxy, kept off the proxy's namespace"""

    def __init__(
        self,
        proxy: "ChainProxy",
        step_handler: StepHandler,
        initial: Any,
        return_value_handler: ReturnValueHandler | None,
        name: str,
        strict_completion: bool,
        loop: asyncio.AbstractEventLoop | None,
    ):
        self.proxy = proxy
        self.step_handler = step_handler
        self.return_value_handler = return_value_handler
        self.name = name
        self.strict_completion = strict_completion
        self.state: dict[str, Any] = {}
        self.pending: asyncio.Future | None = None
        self.logger = ChainLogger(name)

        self._initial = initial
        self._loop = loop
        self._lock = threading.Lock()
        self._count = 0
        self._handler_tasks: set[asyncio.Future] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def _start(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future:
        initial = self._initial
        self._initial = None

        if initial is None:
            resolved = loop.create_future()
            resolved.set_result(())
            return resolved
        if isinstance(initial, ChainProxy):
            initial = tail(initial)
        if isinstance(initial, ChainTail):
            return initial.future
        return loop.create_task(_adopt(initial))

    def _current(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future:
        if self.pending is None:
            self.pending = self._start(loop)
        return self.pending

    def tail(self) -> ChainTail:
        loop = self._get_loop()
        with self._lock:
            return ChainTail(self._current(loop), self.name)

    def enqueue(self, key: str, args: tuple, kwargs: dict[str, Any]) -> Any:
        loop = self._get_loop()

        with self._lock:
            predecessor = self._current(loop)
            self._count += 1
            index = self._count
            stage = loop.create_task(
                self._run_stage(predecessor, key, index, args, kwargs),
                name=f"{self.name}:{index}:{key}",
            )
            self.pending = stage

        self.logger.stage_queued(key, index)

        if self.return_value_handler is None:
            return self.proxy

        ctx = ReturnContext(
            call_args=args,
            call_kwargs=kwargs,
            key=key,
            index=index,
            state=self.state,
            pending=ChainTail(predecessor, self.name),
            stage=ChainTail(stage, self.name),
            chain=self.proxy,
        )
        return self._resolve_return(self.return_value_handler(ctx))

    def _resolve_return(self, result: Any) -> Any:
        if not result:
            return self.proxy
        if isinstance(result, ReturnOverride):
            return result.return_value
        if isinstance(result, Mapping) and "return_value" in result:
            return result["return_value"]
        raise ChainUsageError(
            f"Return-value handler returned {type(result).__name__}; expected a falsy value, "
            "a ReturnOverride, or a mapping with a 'return_value' key",
            self.name,
        )

    async def _run_stage(
        self,
        predecessor: asyncio.Future,
        key: str,
        index: int,
        args: tuple,
        kwargs: dict[str, Any],
    ) -> tuple:
        try:
            prior_result = await predecessor
        except Exception as e:
            self.logger.stage_skipped(key, index, reason=f"{type(e).__name__}: {e}")
            raise

        done = asyncio.get_running_loop().create_future()
        signal = CompletionSignal(done, key, index, self.logger, strict=self.strict_completion)
        ctx = StepContext(
            complete=signal,
            prior_result=prior_result,
            call_args=args,
            call_kwargs=kwargs,
            key=key,
            index=index,
            state=self.state,
            pending=ChainTail(predecessor, self.name),
            chain=self.proxy,
        )

        self.logger.stage_started(key, index)
        with Timer() as timer:
            try:
                self._invoke(ctx, signal)
                result = await done
            except Exception as e:
                self.logger.stage_failed(key, index, f"{type(e).__name__}: {e}", timer.elapsed_ms)
                raise

        self.logger.stage_completed(key, index, timer.elapsed_ms)
        return result

    def _invoke(self, ctx: StepContext, signal: CompletionSignal) -> None:
        """Call the step handler; a handler that already completed keeps its result"""
        try:
            outcome = self.step_handler(ctx)
        except CompletionError:
            raise
        except Exception as e:
            if not signal.called:
                raise
            self._late_error(signal, e)
            return

        if inspect.isawaitable(outcome):
            self._watch_handler(asyncio.ensure_future(outcome), signal)

    def _watch_handler(self, task: asyncio.Future, signal: CompletionSignal) -> None:
        self._handler_tasks.add(task)
        task.add_done_callback(self._handler_tasks.discard)
        task.add_done_callback(partial(self._on_handler_done, signal))

    def _on_handler_done(self, signal: CompletionSignal, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        if signal.called:
            self._late_error(signal, error)
            return
        signal.fail(error)

    def _late_error(self, signal: CompletionSignal, error: BaseException) -> None:
        self.logger.error(
            "Step handler raised after completing its stage",
            key=signal.key,
            index=signal.index,
            error=f"{type(error).__name__}: {error}",
        )


class StepFunction:
    """Callable returned for a step name; each call queues one stage"""

    __slots__ = ("_core", "key")

    def __init__(self, core: _ChainCore, key: str):
        self._core = core
        self.key = key

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._core.enqueue(self.key, args, kwargs)

    def __repr__(self) -> str:
        return f"StepFunction(chain={self._core.name}, key={self.key!r})"


class ChainProxy:
    """
    Chainable step proxy.

    Any attribute (or item key) is a step; calling it queues a stage for the
    step handler and returns the chain, unless a return-value handler
    overrides it. ``chain[""]`` and ``await chain`` give access to the tail.

    Usage:
        def handler(ctx):
            ctx.state.setdefault("calls", []).append((ctx.key, ctx.call_args))
            ctx.complete(len(ctx.state["calls"]))

        chain = ChainProxy(handler)
        chain.first(1).second(2, 3)
        assert await chain == (2,)
    """

    __slots__ = ("_stepchain_core",)

    def __init__(
        self,
        step_handler: StepHandler,
        initial: Any = None,
        return_value_handler: ReturnValueHandler | None = None,
        *,
        name: str | None = None,
        strict_completion: bool | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        chain_config = get_config().chain
        if name is None:
            name = f"{chain_config.name_prefix}-{next(_chain_ids)}"
        if strict_completion is None:
            strict_completion = chain_config.strict_completion

        object.__setattr__(
            self,
            "_stepchain_core",
            _ChainCore(
                self,
                step_handler,
                initial,
                return_value_handler,
                name,
                strict_completion,
                loop,
            ),
        )

    def __getattr__(self, key: str) -> Any:
        # Only reached when normal lookup fails
        if key == "_stepchain_core" or (key.startswith("__") and key.endswith("__")):
            raise AttributeError(key)
        return self[key]

    def __getitem__(self, key: str) -> Any:
        if not isinstance(key, str):
            raise TypeError(f"Step names must be strings, not {type(key).__name__}")
        if key == TAIL_KEY:
            return self._stepchain_core.tail()
        return StepFunction(self._stepchain_core, key)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(
            f"Cannot set '{key}' on a chain; store shared data in the chain state instead"
        )

    def __await__(self):
        return self._stepchain_core.tail().__await__()

    def __repr__(self) -> str:
        core = self._stepchain_core
        return f"ChainProxy(name={core.name}, stages={core._count})"


def create_chain(
    step_handler: StepHandler,
    initial: Any = None,
    return_value_handler: ReturnValueHandler | None = None,
    **kwargs: Any,
) -> ChainProxy:
    """
    Create a chain.

    Args:
        step_handler: Called once per chained call with a StepContext
        initial: Awaitable to run after (another chain, a ChainTail, a future,
            a coroutine); None starts from an already-completed stage
        return_value_handler: Optional; called with a ReturnContext right after
            each call is queued and may override what the call returns
        **kwargs: name, strict_completion, loop

    Returns:
        A new ChainProxy
    """
    return ChainProxy(step_handler, initial, return_value_handler, **kwargs)


def tail(chain: ChainProxy) -> ChainTail:
    """Current tail of a chain; same as ``chain[""]``"""
    return chain[TAIL_KEY]


def get_state(chain: ChainProxy) -> dict[str, Any]:
    """The chain's shared state dict"""
    return chain._stepchain_core.state


def is_chain(obj: Any) -> bool:
    return isinstance(obj, ChainProxy)
