"""Async HTTP utilities using httpx with optional caching."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import httpx

from config import settings
from . import cache

log = logging.getLogger(__name__)


class AsyncHttpError(RuntimeError):
    pass


async def fetch(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    retries: int | None = None,
    backoff: float | None = None,
    use_cache: bool = True,
    cache_ttl: int = cache.DEFAULT_TTL,
) -> str:
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR
    if use_cache:
        cached = cache.get(url, ttl=cache_ttl)
        if cached is not None:
            log.debug("cache hit for %s", url)
            return cached
    close_client = False
    if client is None:
        headers = {"User-Agent": settings.DEFAULT_USER_AGENT}
        client = httpx.AsyncClient(headers=headers, timeout=settings.DEFAULT_TIMEOUT)
        close_client = True
    try:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await client.get(url)
                resp.raise_for_status()
                text = resp.text
                if use_cache:
                    try:
                        cache.set(url, text)
                    except OSError as e:
                        log.warning("could not cache %s: %s", url, e)
                return text
            except (httpx.TimeoutException, httpx.HTTPError) as e:
                if attempt > retries:
                    raise AsyncHttpError(f"Failed to fetch {url} after {retries} retries: {e}") from e
                sleep_for = backoff * (2 ** (attempt - 1))
                log.info(
                    "attempt %d/%d failed for %s: %s; retrying in %.1fs",
                    attempt,
                    retries,
                    url,
                    e,
                    sleep_for,
                )
                await asyncio.sleep(sleep_for)
    finally:
        if close_client:
            await client.aclose()


async def fetch_json(url: str, **kwargs: Any) -> Any:
    """Fetch ``url`` and decode the body as JSON.

    A body that is not valid JSON is dropped from the cache (so a broken
    download is not served again) and surfaces as ``AsyncHttpError``.
    """
    text = await fetch(url, **kwargs)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        cache.invalidate(url)
        raise AsyncHttpError(f"Invalid JSON from {url}: {e}") from e
