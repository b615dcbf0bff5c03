"""
stepchain Errors

Exceptions raised by the chain machinery itself. Handler failures are never
wrapped in these; they propagate through the stage futures unchanged.
"""


class ChainError(Exception):
    """Base class for stepchain errors"""

    def __init__(self, message: str, chain_name: str | None = None):
        super().__init__(message)
        self.chain_name = chain_name


class ReservedKeyError(ChainError):
    """Raised when the reserved tail key is called as if it were a step"""

    def __init__(self, chain_name: str | None = None):
        super().__init__(
            "The empty-string key returns the chain tail and cannot be called as a step. "
            "Use `await chain` or `await chain['']` to wait for queued steps.",
            chain_name,
        )
        self.key = ""


class CompletionError(ChainError):
    """Raised on a second completion signal when strict completion is enabled"""

    def __init__(self, key: str, index: int, chain_name: str | None = None):
        super().__init__(
            f"Stage {index} ('{key}') was already completed; complete() must be called exactly once",
            chain_name,
        )
        self.key = key
        self.index = index


class ChainUsageError(ChainError):
    """Raised when a handler hands the chain something it cannot use"""
