"""
HTTP client for the station query service.

Implements the StationQueries contract over a JSON API:
- GET {base_url}/stations
- GET {base_url}/forecasts?day_of_week=D&hour=H

Transient failures (5xx responses, transport errors) are retried with
exponential backoff and jitter. Nothing is cached here.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from .models import ForecastEntry, Station


logger = logging.getLogger(__name__)


# Retry configuration
MAX_RETRIES = 4
BACKOFF_BASE = 2
BACKOFF_MAX = 8

DEFAULT_TIMEOUT_S = 10.0


def exponential_backoff_with_jitter(attempt: int) -> float:
    """
    Calculate backoff time with exponential growth and jitter.

    Formula: min(BACKOFF_BASE^attempt + random(0,1), BACKOFF_MAX)

    Args:
        attempt: Retry attempt number (0-indexed)

    Returns:
        Sleep time in seconds
    """
    base_delay = BACKOFF_BASE ** attempt
    jitter = random.random()
    return min(base_delay + jitter, BACKOFF_MAX)


class HttpStationQueries:
    """StationQueries implementation talking to the query service over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_retries: int = MAX_RETRIES,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Root URL of the query service
            timeout_s: Per-request timeout in seconds
            max_retries: Total attempts per call (at least 1)
            headers: Extra headers sent with every request (auth, tracing)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.headers = dict(headers or {})
        self._transport = transport

    async def list_stations(self) -> List[Station]:
        payload = await self._get_json("/stations")
        return [Station.model_validate(item) for item in payload]

    async def get_forecasts(self, day_of_week: int, hour: int) -> List[ForecastEntry]:
        payload = await self._get_json(
            "/forecasts",
            params={"day_of_week": day_of_week, "hour": hour},
        )
        return [ForecastEntry.model_validate(item) for item in payload]

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout_s,
                    headers=self.headers,
                    transport=self._transport,
                ) as client:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()

            except httpx.HTTPStatusError as e:
                # 4xx means the request itself is wrong; retrying won't help
                if last_attempt or e.response.status_code < 500:
                    raise
                logger.warning(
                    f"Query service returned {e.response.status_code} for {path} "
                    f"(attempt {attempt + 1}/{self.max_retries}), retrying"
                )

            except httpx.TransportError as e:
                if last_attempt:
                    raise
                logger.warning(
                    f"Query service unreachable for {path}: {e!r} "
                    f"(attempt {attempt + 1}/{self.max_retries}), retrying"
                )

            await asyncio.sleep(exponential_backoff_with_jitter(attempt))

        raise RuntimeError(f"Query service request {path} failed after retries")
