"""Shared httpx client handling."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

USER_AGENT = "Mozilla/5.0 (compatible; GetHostAI-Audit/1.0; +https://gethost.ai)"


@asynccontextmanager
async def open_client(
    client: httpx.AsyncClient | None,
    timeout: float,
) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield ``client`` unchanged, or a short-lived client owned by this block.

    Callers pass the timeout per request as well, so an injected client still
    honours each source's own bound.
    """
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
        yield owned
