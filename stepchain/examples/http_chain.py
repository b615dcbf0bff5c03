#!/usr/bin/env python3
"""
stepchain HTTP Chain Example

A chain whose steps are HTTP requests issued one at a time over a shared
httpx.AsyncClient. The chain state holds the client (the connection pool
handle) and a results table that every request appends to.

Steps:
    connect(base_url=None)       open the client (requests also open it lazily)
    get/post/put/patch/delete/head(path, **httpx_kwargs)
    request(method, path, **httpx_kwargs)
    close()                      close the client, complete with the results

``close()`` evaluates to the chain tail, so a whole chain can be awaited in one
expression:

    (results,) = await create_http_chain("https://api.example.com").get("/a").get("/b").close()

Run this example:
    python -m stepchain.examples.http_chain https://example.com
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import Any

import httpx

from stepchain import (
    ChainProxy,
    ChainUsageError,
    ReturnContext,
    ReturnOverride,
    StepContext,
    create_chain,
)
from stepchain.utils.logging import get_logger
from stepchain.utils.timing import AsyncTimer

logger = get_logger(__name__)

HTTP_METHODS = {
    "get": "GET",
    "post": "POST",
    "put": "PUT",
    "patch": "PATCH",
    "delete": "DELETE",
    "head": "HEAD",
}


@dataclass
class RequestRecord:
    """One row of the results table"""

    method: str
    url: str
    status_code: int
    elapsed_ms: float


class HttpChainHandler:
    """
    Async step handler that performs one HTTP request per stage.

    Args:
        base_url: Base URL for relative request paths
        timeout: Request timeout in seconds
        transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        headers: Default headers for every request
        raise_for_status: Fail the stage on 4xx/5xx responses
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
        raise_for_status: bool = False,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.headers = headers or {}
        self.raise_for_status = raise_for_status

    async def __call__(self, ctx: StepContext) -> None:
        if ctx.key == "connect":
            ctx.complete(self._connect(ctx.state, *ctx.call_args, **ctx.call_kwargs))
        elif ctx.key == "close":
            await self._close(ctx)
        elif ctx.key == "request":
            if len(ctx.call_args) < 2:
                await self._fail(ctx, ChainUsageError("request() needs a method and a path"))
                return
            method, *args = ctx.call_args
            await self._request(ctx, method.upper(), *args, **ctx.call_kwargs)
        elif ctx.key in HTTP_METHODS:
            if not ctx.call_args:
                await self._fail(ctx, ChainUsageError(f"{ctx.key}() needs a path"))
                return
            await self._request(ctx, HTTP_METHODS[ctx.key], *ctx.call_args, **ctx.call_kwargs)
        else:
            await self._fail(ctx, ChainUsageError(f"Unknown HTTP chain step '{ctx.key}'"))

    def _connect(self, state: dict[str, Any], base_url: str | None = None) -> httpx.AsyncClient:
        client = state.get("client")
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url or self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers=self.headers,
            )
            state["client"] = client
            state.setdefault("results", [])
            logger.debug("HTTP client opened", base_url=str(client.base_url))
        return client

    async def _release(self, state: dict[str, Any]) -> None:
        client = state.pop("client", None)
        if client is not None:
            await client.aclose()
            logger.debug("HTTP client closed")

    async def _close(self, ctx: StepContext) -> None:
        await self._release(ctx.state)
        ctx.complete(list(ctx.state.get("results", [])))

    async def _fail(self, ctx: StepContext, error: Exception) -> None:
        # Later stages (close() included) are skipped once this one fails
        await self._release(ctx.state)
        ctx.complete.fail(error)

    async def _request(self, ctx: StepContext, method: str, path: str, **kwargs: Any) -> None:
        client = self._connect(ctx.state)
        try:
            async with AsyncTimer() as timer:
                response = await client.request(method, path, **kwargs)
            if self.raise_for_status:
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("HTTP step failed", method=method, path=path, error=str(e))
            await self._fail(ctx, e)
            return

        ctx.state["results"].append(
            RequestRecord(
                method=method,
                url=str(response.request.url),
                status_code=response.status_code,
                elapsed_ms=round(timer.elapsed_ms, 2),
            )
        )
        ctx.complete(response)


def http_return_value(ctx: ReturnContext) -> ReturnOverride | None:
    """``close()`` evaluates to the stage tail instead of the chain"""
    if ctx.key == "close":
        return ReturnOverride(ctx.stage)
    return None


def create_http_chain(
    base_url: str = "",
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
    headers: dict[str, str] | None = None,
    raise_for_status: bool = False,
    **kwargs: Any,
) -> ChainProxy:
    handler = HttpChainHandler(
        base_url=base_url,
        timeout=timeout,
        transport=transport,
        headers=headers,
        raise_for_status=raise_for_status,
    )
    return create_chain(handler, return_value_handler=http_return_value, **kwargs)


async def fetch_all(urls: list[str], timeout: float = 10.0) -> list[RequestRecord]:
    """GET each URL in turn over one client and return the results table."""
    chain = create_http_chain(timeout=timeout, name="fetch")
    for url in urls:
        chain.get(url)
    (results,) = await chain.close()
    return results


async def main(urls: list[str]):
    print("\n" + "=" * 60)
    print("  stepchain HTTP Chain")
    print("=" * 60 + "\n")

    for record in await fetch_all(urls):
        print(f"  🌐 {record.method} {record.url} -> {record.status_code} ({record.elapsed_ms:.0f}ms)")
    print()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:] or ["https://example.com"]))
