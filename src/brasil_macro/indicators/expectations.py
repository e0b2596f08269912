"""Focus market expectations summary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date

from brasil_macro.core.models import FocusExpectation, FocusProjection, FocusSummary
from brasil_macro.sources.focus import FocusClient

logger = logging.getLogger(__name__)

FOCUS_INDICATORS = ["IPCA", "PIB Total", "Selic", "Câmbio", "IGP-M"]
HORIZON_YEARS = 3


def latest_projections(
    expectations: list[FocusExpectation],
    current_year: int,
    horizon: int = HORIZON_YEARS,
) -> list[FocusProjection]:
    """Most recent projection per reference year in ``[current_year, current_year + horizon]``.

    ``expectations`` need not be ordered; the newest survey date wins.
    """
    newest: dict[int, FocusExpectation] = {}
    for item in expectations:
        year = item.reference_year
        if year is None or not current_year <= year <= current_year + horizon:
            continue
        seen = newest.get(year)
        if seen is None or item.survey_date > seen.survey_date:
            newest[year] = item

    return [
        FocusProjection(
            year=year,
            median=item.median,
            mean=item.mean,
            minimum=item.minimum,
            maximum=item.maximum,
        )
        for year, item in sorted(newest.items())
    ]


class ExpectationsService:
    """Summarises Focus projections for the headline indicators."""

    def __init__(
        self,
        client: FocusClient,
        indicators: list[str] | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._indicators = indicators or list(FOCUS_INDICATORS)
        self._clock = clock

    async def expectations(self, indicator: str) -> list[FocusExpectation]:
        return await self._client.fetch_expectations(indicator)

    async def summary(self) -> list[FocusSummary]:
        """One FocusSummary per indicator that has projections in range."""
        current_year = self._clock().year
        batches = await asyncio.gather(
            *(self._client.fetch_expectations(name) for name in self._indicators)
        )

        summaries: list[FocusSummary] = []
        for name, rows in zip(self._indicators, batches):
            projections = latest_projections(rows, current_year)
            if not projections:
                logger.debug("No Focus projections in range for %s", name)
                continue
            summaries.append(
                FocusSummary(
                    indicator=name,
                    current_year=current_year,
                    next_year=current_year + 1,
                    projections=projections,
                )
            )
        return summaries
