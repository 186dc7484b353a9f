"""Page fetcher - single GET of the audited page."""

from __future__ import annotations

import logging
import time

import httpx

from hostaudit.core.http import USER_AGENT, open_client
from hostaudit.schemas.audit import RawPageFetch

logger = logging.getLogger(__name__)


async def fetch_page(
    url: str,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> RawPageFetch:
    """
    Fetch the target page, following redirects.

    Never raises: transport failures come back as a RawPageFetch with
    ``status_code=0``, an empty body and ``error`` set.

    Args:
        url: Absolute URL of the page
        timeout: Request timeout in seconds
        client: Optional shared client (tests inject a mock transport)
    """
    start = time.monotonic()

    try:
        async with open_client(client, timeout) as http:
            response = await http.get(
                url,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                timeout=timeout,
            )
            html = response.text
    except (httpx.HTTPError, OSError) as e:
        elapsed = int((time.monotonic() - start) * 1000)
        logger.warning(f"Page fetch failed for {url}: {e!r}")
        return RawPageFetch(url=url, load_time_ms=elapsed, error=str(e) or repr(e))

    elapsed = int((time.monotonic() - start) * 1000)
    logger.info(
        f"Fetched {url}: status={response.status_code} "
        f"bytes={len(response.content)} in {elapsed}ms"
    )

    return RawPageFetch(
        url=url,
        html=html,
        status_code=response.status_code,
        headers={k.lower(): v for k, v in response.headers.items()},
        load_time_ms=elapsed,
        body_bytes=len(response.content),
    )
