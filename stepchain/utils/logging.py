"""
stepchain Structured Logging

Structured logging with structlog. Chains log their stage lifecycle through
ChainLogger so every record carries the chain name.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure stepchain logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON logs (for production)
        include_timestamp: Include timestamp in logs

    Usage:
        from stepchain.utils.logging import configure_logging
        configure_logging(level="DEBUG", json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> Any:
    """
    Get a structlog logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("Stage queued", chain="chain-1", key="fetch")
    """
    return structlog.get_logger(name)


class ChainLogger:
    """
    Logger for one chain's stage lifecycle.

    Usage:
        logger = ChainLogger("chain-1")
        logger.stage_queued("fetch", index=1)
        logger.stage_completed("fetch", index=1, duration_ms=12.5)
    """

    def __init__(self, chain_name: str):
        self.chain_name = chain_name
        self._logger = get_logger(f"stepchain.chain.{chain_name}")

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        kwargs["chain"] = self.chain_name
        log_method = getattr(self._logger, level, self._logger.info)
        log_method(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("info", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("debug", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("error", message, **kwargs)

    def stage_queued(self, key: str, index: int) -> None:
        self.debug("Stage queued", key=key, index=index)

    def stage_started(self, key: str, index: int) -> None:
        self.debug("Stage started", key=key, index=index)

    def stage_completed(self, key: str, index: int, duration_ms: float) -> None:
        self.debug("Stage completed", key=key, index=index, duration_ms=round(duration_ms, 2))

    def stage_failed(self, key: str, index: int, error: str, duration_ms: float) -> None:
        self.error(
            "Stage failed",
            key=key,
            index=index,
            error=error,
            duration_ms=round(duration_ms, 2),
        )

    def stage_skipped(self, key: str, index: int, reason: str) -> None:
        self.debug("Stage skipped", key=key, index=index, reason=reason)

    def duplicate_completion(self, key: str, index: int) -> None:
        self.warning("Completion signal called more than once; ignoring", key=key, index=index)
