"""
stepchain: chainable, serialized async steps

Every attribute of a chain is a step. Calling steps queues them one after
another; each step's handler starts only once the previous one has signalled
completion.

Usage:
    import stepchain

    def handler(ctx: stepchain.StepContext):
        ctx.state.setdefault("seen", []).append(ctx.key)
        asyncio.get_running_loop().call_later(0.1, ctx.complete, ctx.key)

    chain = stepchain.create_chain(handler)
    chain.connect().query("users").close()
    await chain                       # waits for all three steps
    stepchain.get_state(chain)        # {"seen": ["connect", "query", "close"]}

Return-value handlers:
    def returns(ctx: stepchain.ReturnContext):
        if ctx.key == "close":
            return stepchain.ReturnOverride(ctx.stage)

    chain = stepchain.create_chain(handler, return_value_handler=returns)
    await chain.connect().close()     # close() returns the tail directly

CLI Usage:
    stepchain demo --delays 0.1 0.01 0.05
    stepchain fetch https://example.com/a https://example.com/b
    stepchain config
"""

# Configuration
from stepchain.config import Config, get_config, reload_config, set_config

# Core
from stepchain.core.context import (
    ChainTail,
    CompletionSignal,
    ReturnContext,
    ReturnOverride,
    StepContext,
)
from stepchain.core.errors import (
    ChainError,
    ChainUsageError,
    CompletionError,
    ReservedKeyError,
)
from stepchain.core.proxy import (
    ChainProxy,
    StepFunction,
    create_chain,
    get_state,
    is_chain,
    tail,
)

# Utilities
from stepchain.utils import (
    ChainLogger,
    configure_logging,
    get_logger,
)

__version__ = "0.1.0"
__all__ = [
    # Main entry points
    "ChainProxy",
    "StepFunction",
    "create_chain",
    "tail",
    "get_state",
    "is_chain",
    # Context
    "StepContext",
    "ReturnContext",
    "ReturnOverride",
    "CompletionSignal",
    "ChainTail",
    # Errors
    "ChainError",
    "ReservedKeyError",
    "CompletionError",
    "ChainUsageError",
    # Configuration
    "Config",
    "get_config",
    "set_config",
    "reload_config",
    # Utilities - Logging
    "configure_logging",
    "get_logger",
    "ChainLogger",
]
