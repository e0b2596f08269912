"""Source adapter protocol and the shared HTTP plumbing behind it.

Architecture
------------
Every upstream service is wrapped by an adapter that turns its wire format
into canonical ``ObservationPoint`` records:

    Upstream JSON → SourceAdapter → FetchResult → SeriesAggregator

- **SourceAdapter** is the consumer-facing protocol. The aggregator depends
  only on this interface and routes to an adapter by ``SourceName``.

- **HttpSource** owns one ``httpx.AsyncClient`` (bounded timeout) and one
  ``AsyncLimiter`` per upstream. There are no retries and no caching: an
  upstream failure surfaces as ``SourceError`` inside the adapter, which
  converts it into ``FetchResult.failure``.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Protocol, runtime_checkable

import httpx
from aiolimiter import AsyncLimiter

from brasil_macro.core.exceptions import SourceError
from brasil_macro.core.models import FetchResult, SeriesId

logger = logging.getLogger(__name__)

# Placeholders used upstream for "no value" (SIDRA uses several of them)
_MISSING_MARKERS = frozenset({"", "-", "--", "...", "..", "x", "X", "null"})


@runtime_checkable
class SourceAdapter(Protocol):
    """Fetches one upstream series as canonical observation points.

    Parameters
    ----------
    series_id : str
        Source-specific series key (an SGS code, a SIDRA table/variable...).
    periods : int | None
        Number of most recent monthly periods wanted.
    start, end : date | None
        Explicit date range (inclusive). Takes precedence over ``periods``.

    Returns
    -------
    FetchResult
        Points sorted ascending. Never raises for upstream problems.
    """

    async def fetch(
        self,
        series_id: SeriesId,
        *,
        periods: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> FetchResult: ...

    async def close(self) -> None: ...


class HttpSource:
    """Rate-limited async HTTP access to one upstream service.

    Use via ``async with`` or call ``close()`` when done. An externally
    supplied ``client`` is not closed by this object.
    """

    source_name: str = "http"

    def __init__(
        self,
        *,
        timeout: float,
        rate_limit: int,
        user_agent: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._limiter = AsyncLimiter(max_rate=rate_limit, time_period=1.0)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> HttpSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            SourceError: On transport errors, non-2xx statuses or bodies
                that are not JSON.
        """
        await self._limiter.acquire()
        logger.debug("[%s] GET %s params=%s", self.source_name, url, params)
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                f"HTTP {e.response.status_code} from {self.source_name}",
                context={
                    "source": self.source_name,
                    "url": url,
                    "status_code": e.response.status_code,
                },
            ) from e
        except httpx.RequestError as e:
            raise SourceError(
                f"Request to {self.source_name} failed: {e}",
                context={"source": self.source_name, "url": url, "status_code": None},
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise SourceError(
                f"{self.source_name} returned a non-JSON body",
                context={"source": self.source_name, "url": url, "status_code": 200},
            ) from e


def parse_decimal(raw: Any) -> float | None:
    """Parse a string-encoded decimal, returning None when unusable.

    Accepts dot or comma decimal separators (``"0,45"``, ``"1.234,56"``)
    and rejects placeholders and non-finite values.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None

    text = str(raw).strip()
    if text in _MISSING_MARKERS:
        return None
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def shift_months(d: date, months: int) -> date:
    """First day of the month ``months`` away from ``d``'s month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)
