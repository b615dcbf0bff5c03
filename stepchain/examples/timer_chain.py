#!/usr/bin/env python3
"""
stepchain Timer Chain Example

Each step waits for the delay given as its first argument and then records
itself in the chain state. Steps finish in call order even when earlier steps
wait longer than later ones.

Run this example:
    python -m stepchain.examples.timer_chain
"""

import asyncio
from dataclasses import dataclass

from stepchain import ChainProxy, StepContext, create_chain, get_state


@dataclass
class TimerRecord:
    """One finished timer step"""

    key: str
    index: int
    delay: float


def timer_handler(ctx: StepContext) -> None:
    """Complete the stage after ``ctx.call_args[0]`` seconds (default 0)."""
    delay = float(ctx.call_args[0]) if ctx.call_args else 0.0

    def fire() -> None:
        ctx.state.setdefault("log", []).append(TimerRecord(ctx.key, ctx.index, delay))
        ctx.complete(delay)

    asyncio.get_running_loop().call_later(delay, fire)


def create_timer_chain(**kwargs) -> ChainProxy:
    return create_chain(timer_handler, **kwargs)


async def run_timers(delays: list[float]) -> list[TimerRecord]:
    """Queue one ``wait`` step per delay and return the records in finish order."""
    chain = create_timer_chain(name="timers")
    for delay in delays:
        chain.wait(delay)
    await chain
    return list(get_state(chain).get("log", []))


async def main():
    print("\n" + "=" * 60)
    print("  stepchain Timer Chain")
    print("=" * 60 + "\n")

    records = await run_timers([0.1, 0.01, 0.05])
    for record in records:
        print(f"  ⏱  step {record.index} ({record.key}) waited {record.delay * 1000:.0f}ms")

    print("\n  Steps finished in call order despite shorter later delays.\n")


if __name__ == "__main__":
    asyncio.run(main())
