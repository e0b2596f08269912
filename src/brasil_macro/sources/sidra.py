"""IBGE SIDRA adapter.

SIDRA answers ``/values/t/{table}/n1/all/v/{variable}/p/{periods}/d/v{variable} 2``
with a JSON list whose first element is a header row. Each data row carries
``V`` (value), ``D3C`` (period code) and ``D3N`` (period label).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError

from brasil_macro.core.config import SidraConfig
from brasil_macro.core.exceptions import SourceError
from brasil_macro.core.models import (
    FetchResult,
    ObservationPoint,
    SeriesId,
    format_period_code,
)
from brasil_macro.sources.base import HttpSource, parse_decimal

logger = logging.getLogger(__name__)

# Table/variable pairs for the series the catalog routes to
SIDRA_TABLES: dict[str, SeriesId] = {
    "IPCA": "1737/63",
    "INPC": "1736/44",
    "IPCA15": "3065/355",
    "UNEMPLOYMENT": "6381/4099",
    "INDUSTRIAL_PRODUCTION": "8159/11599",
    "RETAIL_SALES": "8880/11706",
    "SERVICES": "8161/11621",
    "GDP_QUARTERLY": "1846/585",
}

_DEFAULT_PERIODS = 120


def split_series_id(series_id: SeriesId) -> tuple[str, str]:
    """Split ``"table/variable"`` into its parts.

    Raises:
        ValueError: If the id is not two numeric parts.
    """
    parts = series_id.split("/")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"SIDRA series id must be 'table/variable', got {series_id!r}")
    return parts[0], parts[1]


def parse_sidra_period(code: Any) -> tuple[int, int] | None:
    """Map a SIDRA period code to (year, month).

    ``YYYYMM`` is a month. ``YYYYQ`` is a quarter, keyed to its last month.
    """
    if not isinstance(code, str) or not code.isdigit():
        return None
    if len(code) == 6:
        year, month = int(code[:4]), int(code[4:])
    elif len(code) == 5:
        quarter = int(code[4])
        if not 1 <= quarter <= 4:
            return None
        year, month = int(code[:4]), quarter * 3
    else:
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


def parse_sidra_rows(rows: Any) -> list[ObservationPoint]:
    """Convert SIDRA rows (header already removed) into ObservationPoints.

    Rows without a usable period or value (``"..."``, ``"-"``) are dropped,
    as are rows whose period cannot be dated.
    Duplicate periods keep the last row seen.
    """
    if not isinstance(rows, list):
        return []

    by_period: dict[str, ObservationPoint] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        period = parse_sidra_period(row.get("D3C"))
        value = parse_decimal(row.get("V"))
        if period is None or value is None:
            logger.debug("Dropping malformed SIDRA row: %r", row)
            continue
        year, month = period
        name = row.get("D3N")
        if not isinstance(name, str) or not name:
            name = None
        try:
            point = ObservationPoint.for_month(year, month, value, period_name=name)
        except (ValueError, ValidationError) as e:
            logger.debug("Dropping SIDRA row %r: %s", row, e)
            continue
        by_period[point.period_code] = point

    return [by_period[k] for k in sorted(by_period)]


class SidraAdapter(HttpSource):
    """Fetches IBGE aggregate tables from SIDRA."""

    source_name = "ibge"

    def __init__(self, config: SidraConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(
            timeout=config.request_timeout,
            rate_limit=config.rate_limit,
            user_agent=config.user_agent,
            client=client,
        )
        self._base_url = config.base_url

    def build_url(
        self,
        series_id: SeriesId,
        periods: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> str:
        table, variable = split_series_id(series_id)
        if start is not None or end is not None:
            end = end or date.today()
            start = start or end
            period = (
                f"{format_period_code(start.year, start.month)}"
                f"-{format_period_code(end.year, end.month)}"
            )
        else:
            period = f"last%20{periods or _DEFAULT_PERIODS}"
        return (
            f"{self._base_url}/t/{table}/n1/all/v/{variable}"
            f"/p/{period}/d/v{variable}%202"
        )

    async def fetch(
        self,
        series_id: SeriesId,
        *,
        periods: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> FetchResult:
        try:
            url = self.build_url(series_id, periods, start, end)
        except ValueError as e:
            logger.warning("Invalid SIDRA series id %r: %s", series_id, e)
            return FetchResult.failure(str(e))

        try:
            raw = await self._get_json(url)
        except SourceError as e:
            logger.warning("SIDRA table %s unavailable: %s", series_id, e)
            return FetchResult.failure(str(e))

        if not isinstance(raw, list):
            logger.warning("SIDRA table %s returned a non-list payload", series_id)
            return FetchResult.failure(
                f"unexpected SIDRA payload type: {type(raw).__name__}"
            )

        # First row is the column header
        points = parse_sidra_rows(raw[1:])
        if periods is not None and len(points) > periods:
            points = points[-periods:]

        logger.debug("SIDRA table %s: %d points", series_id, len(points))
        return FetchResult.success(points)
