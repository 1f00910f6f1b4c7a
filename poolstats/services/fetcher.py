import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from poolstats.core.config import Settings
from poolstats.core.exceptions import FetchError
from poolstats.logs import collector_logger


USER_STATS = "user_stats"
CAR_STATS = "car_stats"
HOURLY_STATS = "hourly_stats"


def endpoint_urls(settings: Settings) -> Dict[str, str]:
    base = settings.STATS_API_BASE_URL.rstrip("/")
    return {
        USER_STATS: f"{base}/stats?limit={settings.USER_STATS_LIMIT}",
        CAR_STATS: f"{base}/car-stats",
        HOURLY_STATS: f"{base}/hourly-stats",
    }


async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


async def fetch_json(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    max_retries: int = 3,
    retry_delay_ms: int = 1000,
    timeout: float = 10.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """GET ``url`` and decode the JSON body, retrying failed attempts.

    Makes at most ``max_retries + 1`` attempts. A non-2xx status, a transport
    error or an undecodable body fails the attempt; before attempt ``n + 1``
    the call waits ``retry_delay_ms * n`` milliseconds. When the last attempt
    fails a :class:`FetchError` is raised with the last underlying error
    chained as its cause.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be non-negative, got {max_retries}")
    attempts = max_retries + 1
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=timeout)

    try:
        for attempt in range(1, attempts + 1):
            try:
                return await _get_json(client, url)
            except (httpx.HTTPError, ValueError) as exc:
                if attempt == attempts:
                    collector_logger.error(f"Request to {url} failed after {attempts} attempts: {exc}")
                    raise FetchError(url, attempts, exc) from exc
                collector_logger.warning(f"Request to {url} failed (attempt {attempt}/{attempts}): {exc}")
                await sleep(retry_delay_ms * attempt / 1000)
    finally:
        if owns_client:
            await client.aclose()
