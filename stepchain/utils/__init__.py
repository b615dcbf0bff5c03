"""stepchain Utilities Module"""

from stepchain.utils.timing import AsyncTimer, Timer

# Structured logging
from stepchain.utils.logging import (
    ChainLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    # Timing
    "Timer",
    "AsyncTimer",
    # Logging
    "configure_logging",
    "get_logger",
    "ChainLogger",
]
