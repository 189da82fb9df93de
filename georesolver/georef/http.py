from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from .config import DEFAULT_GEOREF_CONFIG, GeorefConfig
from .errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """Shared aiohttp session for GET requests that return JSON."""

    def __init__(self, config: GeorefConfig = DEFAULT_GEOREF_CONFIG) -> None:
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout)
            headers = {
                "User-Agent": self._config.user_agent,
                "Accept": "application/json",
            }
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_json(self, url: str, params: dict[str, Any], operation: str) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Transport errors, timeouts, HTTP errors and non-JSON bodies all raise
        ``UpstreamUnavailable`` tagged with ``operation``.
        """
        sess = await self._get_session()
        logger.debug("GET %s params=%s (%s)", url, params, operation)
        try:
            async with sess.get(url, params=params) as resp:
                status = resp.status
                if status >= 400:
                    body = await resp.text(errors="replace")
                    logger.error("%s failed with HTTP %s: %s", operation, status, body[:500])
                    raise UpstreamUnavailable(operation, status=status, body=body)
                try:
                    return await resp.json(content_type=None)
                except ValueError as exc:
                    body = await resp.text(errors="replace")
                    logger.error("%s returned a non-JSON body", operation)
                    raise UpstreamUnavailable(operation, status=status, body=body) from exc
        except asyncio.TimeoutError as exc:
            logger.error("%s timed out after %ss", operation, self._config.timeout)
            raise UpstreamUnavailable(operation, body="timeout") from exc
        except aiohttp.ClientError as exc:
            logger.error("%s failed: %s", operation, exc)
            raise UpstreamUnavailable(operation, body=str(exc)) from exc
