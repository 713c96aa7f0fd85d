"""Async JSON GET client for the upstream provider APIs."""
import asyncio
from typing import Any, Dict, Optional

import aiohttp

from mcapfeed.config import BACKOFF_MULTIPLIER, MAX_RETRIES, REQUEST_TIMEOUT, RETRY_WAIT
from mcapfeed.exceptions import MalformedPayloadError, TransportError, UpstreamStatusError
from mcapfeed.utils import setup_logger

logger = setup_logger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json"}


class JsonClient:
    """
    Thin wrapper around an ``aiohttp.ClientSession``.

    Translates every failure into a ``ProviderError`` subclass so adapters
    only have one family of exceptions to handle. Rate limits (429) and
    5xx answers are retried with a growing sleep, other statuses fail
    immediately.

    Use as an async context manager, or pass in an existing session
    which the client will then not close.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_wait: float = RETRY_WAIT,
    ):
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max_retries
        self.retry_wait = retry_wait

    async def __aenter__(self) -> "JsonClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def open(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=DEFAULT_HEADERS, timeout=self.timeout)
            self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            TransportError: connection failure or timeout on the last attempt
            UpstreamStatusError: non-2xx status
            MalformedPayloadError: body is not JSON
        """
        await self.open()
        cur_wait = self.retry_wait
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                async with self._session.get(
                    url, params=params, headers=DEFAULT_HEADERS, timeout=self.timeout
                ) as r:
                    logger.debug(f"GET {url} (attempt {attempt}/{attempts}) - Status: {r.status}")

                    if r.status == 429 or r.status >= 500:
                        if attempt < attempts:
                            logger.warning(f"{url}: HTTP {r.status} (try {attempt}/{attempts}) -> sleep {cur_wait:.1f}s")
                            await asyncio.sleep(cur_wait)
                            cur_wait *= BACKOFF_MULTIPLIER
                            continue
                        raise UpstreamStatusError(f"{url}: HTTP {r.status}", status=r.status)

                    if r.status < 200 or r.status >= 300:
                        raise UpstreamStatusError(f"{url}: HTTP {r.status}", status=r.status)

                    try:
                        return await r.json(content_type=None)
                    except ValueError as e:
                        raise MalformedPayloadError(f"{url}: invalid JSON body ({e})") from e

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < attempts:
                    logger.warning(f"{url}: {type(e).__name__} (try {attempt}/{attempts}) -> sleep {cur_wait:.1f}s")
                    await asyncio.sleep(cur_wait)
                    cur_wait *= BACKOFF_MULTIPLIER
                    continue
                raise TransportError(f"{url}: {type(e).__name__}: {e}") from e

        # Only reachable with max_retries < 0
        raise TransportError(f"{url}: no attempts made")
