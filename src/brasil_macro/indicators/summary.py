"""Indicator summaries: latest value, change, 12-month and YTD accumulation.

Summaries use two fetch depths. The display window (``display_periods``)
provides current/previous/change. The accumulation window
(``accumulation_periods``) provides the 12-month and year-to-date
compounding, and is only fetched for compoundable indicators.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date

from brasil_macro.core.config import IndicatorsConfig
from brasil_macro.core.models import IndicatorDefinition, Series, SummaryResult
from brasil_macro.indicators.aggregator import SeriesAggregator
from brasil_macro.indicators.compounding import accumulated, accumulated_ytd

logger = logging.getLogger(__name__)

ACCUMULATION_MONTHS = 12


def summarize_series(
    code: str,
    display: Series,
    deep: Series | None,
    today: date,
) -> SummaryResult:
    """Derive a SummaryResult from already-fetched series.

    ``deep`` is None for indicators that are not compoundable; both
    accumulations are then null.
    """
    points = display.points
    if not points:
        return SummaryResult(code=code)

    current = points[-1]
    previous = points[-2] if len(points) > 1 else None

    accumulated_12m = None
    accumulated_year = None
    if deep is not None:
        accumulated_12m = accumulated(deep.points, ACCUMULATION_MONTHS)
        accumulated_year = accumulated_ytd(deep.points, today.year)

    return SummaryResult(
        code=code,
        current_value=current.value,
        previous_value=previous.value if previous else None,
        change=current.value - previous.value if previous else None,
        accumulated_12m=accumulated_12m,
        accumulated_ytd=accumulated_year,
        last_update=current.date,
    )


class SummaryCalculator:
    """Builds SummaryResults through the aggregator.

    Parameters
    ----------
    aggregator : SeriesAggregator
        Source of both the display and the accumulation series.
    settings : IndicatorsConfig
        Provides ``display_periods`` and ``accumulation_periods``.
    clock : Callable[[], date]
        Returns "today"; its year selects the YTD window.
    """

    def __init__(
        self,
        aggregator: SeriesAggregator,
        settings: IndicatorsConfig,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._aggregator = aggregator
        self._display_periods = settings.display_periods
        self._accumulation_periods = settings.accumulation_periods
        self._clock = clock

    async def summarize(self, code: str) -> SummaryResult | None:
        """Summary for ``code``, or None if the code is unknown."""
        definition = self._aggregator.catalog.resolve(code)
        if definition is None:
            return None

        display, deep = await self._fetch_windows(definition)
        if display is None:
            return None
        logger.debug(
            "Summarizing %s: %d display points, %s accumulation points",
            definition.code,
            len(display.points),
            len(deep.points) if deep is not None else "no",
        )
        return summarize_series(definition.code, display, deep, self._clock())

    async def summarize_many(self, codes: list[str]) -> list[SummaryResult]:
        """Summaries for several codes concurrently; unknown codes are skipped."""
        results = await asyncio.gather(*(self.summarize(code) for code in codes))
        return [r for r in results if r is not None]

    async def _fetch_windows(
        self, definition: IndicatorDefinition
    ) -> tuple[Series | None, Series | None]:
        if not definition.compoundable:
            display = await self._aggregator.get_series(
                definition.code, self._display_periods
            )
            return display, None

        display, deep = await asyncio.gather(
            self._aggregator.get_series(definition.code, self._display_periods),
            self._aggregator.get_series(definition.code, self._accumulation_periods),
        )
        return display, deep
