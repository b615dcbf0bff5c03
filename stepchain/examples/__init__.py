"""stepchain Example Handlers"""

from stepchain.examples.http_chain import (
    HttpChainHandler,
    RequestRecord,
    create_http_chain,
    fetch_all,
    http_return_value,
)
from stepchain.examples.timer_chain import (
    TimerRecord,
    create_timer_chain,
    run_timers,
    timer_handler,
)

__all__ = [
    "HttpChainHandler",
    "RequestRecord",
    "create_http_chain",
    "fetch_all",
    "http_return_value",
    "TimerRecord",
    "create_timer_chain",
    "run_timers",
    "timer_handler",
]
