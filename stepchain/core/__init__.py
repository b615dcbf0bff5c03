"""stepchain Core Module"""

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

__all__ = [
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
]
