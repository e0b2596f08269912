"""Banco Central do Brasil SGS adapter.

The SGS service returns a JSON list of ``{"data": "DD/MM/YYYY", "valor":
"<decimal>"}`` rows. Two endpoints are used:

- ``bcdata.sgs.{id}/dados/ultimos/{n}`` for small counts (SGS caps ``n``
  at 20);
- ``bcdata.sgs.{id}/dados?dataInicial=...&dataFinal=...`` for everything
  else. Daily series only accept windows of up to ten years.

Daily series (PTAX exchange rates, daily SELIC) are reduced to month
granularity: the last observation of each month stands for that month.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from brasil_macro.core.config import BCBConfig
from brasil_macro.core.exceptions import SourceError
from brasil_macro.core.models import FetchResult, ObservationPoint, SeriesId
from brasil_macro.sources.base import HttpSource, parse_decimal, shift_months

logger = logging.getLogger(__name__)

# SGS codes for the series the catalog routes to
BCB_SERIES: dict[str, SeriesId] = {
    "SELIC_DAILY": "11",
    "SELIC_TARGET": "432",
    "SELIC_MONTHLY": "4390",
    "CDI_MONTHLY": "4391",
    "IGP_M": "189",
    "IGP_DI": "190",
    "USD_BRL_SELL": "10813",
    "USD_BRL_BUY": "10814",
    "EUR_BRL": "21619",
    "IBC_BR": "24363",
    "DEBT_GDP": "4513",
    "PRIMARY_RESULT": "5793",
    "TRADE_BALANCE": "22707",
    "CURRENT_ACCOUNT": "22724",
}

# Series published with daily observations
DAILY_SERIES = frozenset({"1", "11", "10813", "10814", "21619"})

_MAX_LAST_N = 20
_DAILY_WINDOW_MONTHS = 120
_DEFAULT_PERIODS = 20


def parse_sgs_date(raw: Any) -> date | None:
    """Parse an SGS ``DD/MM/YYYY`` date, or None if malformed."""
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw.strip(), "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_sgs_records(records: Any) -> list[ObservationPoint]:
    """Convert raw SGS rows into monthly ObservationPoints.

    Rows with an unparseable date or value are dropped. When a month has
    several observations the latest-dated one wins.

    Returns:
        Points sorted by period ascending.
    """
    if not isinstance(records, list):
        return []

    latest: dict[tuple[int, int], tuple[date, float]] = {}
    for row in records:
        if not isinstance(row, dict):
            continue
        observed = parse_sgs_date(row.get("data"))
        value = parse_decimal(row.get("valor"))
        if observed is None or value is None:
            logger.debug("Dropping malformed SGS row: %r", row)
            continue
        key = (observed.year, observed.month)
        current = latest.get(key)
        if current is None or observed >= current[0]:
            latest[key] = (observed, value)

    points: list[ObservationPoint] = []
    for (year, month), (_, value) in sorted(latest.items()):
        try:
            points.append(ObservationPoint.for_month(year, month, value))
        except (ValueError, ValidationError) as e:
            logger.debug("Dropping SGS observation %04d-%02d: %s", year, month, e)
    return points


def _format_sgs_date(d: date) -> str:
    return d.strftime("%d/%m/%Y")


class BCBSeriesAdapter(HttpSource):
    """Fetches SGS time series from the central bank.

    All failures degrade to ``FetchResult.failure``; nothing is retried.
    """

    source_name = "bcb"

    def __init__(
        self,
        config: BCBConfig,
        client: httpx.AsyncClient | None = None,
        today: date | None = None,
    ) -> None:
        super().__init__(
            timeout=config.request_timeout,
            rate_limit=config.rate_limit,
            user_agent=config.user_agent,
            client=client,
        )
        self._base_url = config.base_url
        self._today = today

    def _current_date(self) -> date:
        return self._today or date.today()

    def build_request(
        self,
        series_id: SeriesId,
        periods: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[str, dict[str, str]]:
        """Choose the SGS endpoint and query parameters for a request."""
        params = {"formato": "json"}
        is_daily = series_id in DAILY_SERIES

        if start is None and end is None:
            n = periods or _DEFAULT_PERIODS
            if not is_daily and n <= _MAX_LAST_N:
                return f"{self._base_url}.{series_id}/dados/ultimos/{n}", params
            today = self._current_date()
            end = today
            months = min(n, _DAILY_WINDOW_MONTHS) if is_daily else n
            start = shift_months(today, -(months - 1))
        else:
            end = end or self._current_date()
            start = start or shift_months(end, -(_MAX_LAST_N - 1))
            if is_daily and start < shift_months(end, -(_DAILY_WINDOW_MONTHS - 1)):
                start = shift_months(end, -(_DAILY_WINDOW_MONTHS - 1))

        params["dataInicial"] = _format_sgs_date(start)
        params["dataFinal"] = _format_sgs_date(end)
        return f"{self._base_url}.{series_id}/dados", params

    async def fetch(
        self,
        series_id: SeriesId,
        *,
        periods: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> FetchResult:
        """Fetch an SGS series.

        When ``periods`` is given, only that many most recent monthly
        points are kept.
        """
        url, params = self.build_request(series_id, periods, start, end)
        try:
            raw = await self._get_json(url, params)
        except SourceError as e:
            logger.warning("BCB series %s unavailable: %s", series_id, e)
            return FetchResult.failure(str(e))

        if not isinstance(raw, list):
            logger.warning(
                "BCB series %s returned %s instead of a list",
                series_id,
                type(raw).__name__,
            )
            return FetchResult.failure(
                f"unexpected SGS payload type: {type(raw).__name__}"
            )

        points = parse_sgs_records(raw)
        if start is not None or end is not None:
            lo = start.replace(day=1) if start else None
            points = [
                p
                for p in points
                if (lo is None or p.date >= lo) and (end is None or p.date <= end)
            ]
        if periods is not None and len(points) > periods:
            points = points[-periods:]

        logger.debug("BCB series %s: %d points", series_id, len(points))
        return FetchResult.success(points)
