"""MacroDataService: the operations the API and CLI expose.

Wires the catalog, source adapters, aggregator, calculators and the Focus
client together. Every call recomputes from fresh upstream data.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date

from brasil_macro.core.config import MacroConfig
from brasil_macro.core.models import (
    CorrectionFailure,
    CorrectionResult,
    CsvExport,
    FocusExpectation,
    FocusSummary,
    IndicatorDefinition,
    Series,
    SourceName,
    SummaryResult,
)
from brasil_macro.indicators.aggregator import SeriesAggregator
from brasil_macro.indicators.catalog import IndicatorCatalog, build_default_catalog
from brasil_macro.indicators.correction import CorrectionEngine
from brasil_macro.indicators.expectations import ExpectationsService
from brasil_macro.indicators.export import render_csv
from brasil_macro.indicators.summary import SummaryCalculator
from brasil_macro.sources.base import SourceAdapter
from brasil_macro.sources.bcb import BCBSeriesAdapter
from brasil_macro.sources.focus import FocusClient
from brasil_macro.sources.sidra import SidraAdapter


MULTI_SERIES_DEFAULT_PERIODS = 60


class MacroDataService:
    """Facade over the indicator core.

    Adapters and the Focus client passed in are used as-is and left open on
    ``close()``; the ones built from ``config`` are owned and closed.

    Use via ``async with MacroDataService(config) as service:``.
    """

    def __init__(
        self,
        config: MacroConfig,
        catalog: IndicatorCatalog | None = None,
        adapters: Mapping[SourceName, SourceAdapter] | None = None,
        focus: FocusClient | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._config = config
        self._clock = clock
        self._owned: list[SourceAdapter | FocusClient] = []

        self.catalog = catalog or build_default_catalog()

        if adapters is None:
            adapters = {
                SourceName.BCB: BCBSeriesAdapter(config.bcb),
                SourceName.IBGE: SidraAdapter(config.sidra),
            }
            self._owned.extend(adapters.values())
        if focus is None:
            focus = FocusClient(config.bcb)
            self._owned.append(focus)

        settings = config.indicators
        self.aggregator = SeriesAggregator(
            self.catalog, adapters, max_periods=settings.max_periods
        )
        self.summaries = SummaryCalculator(self.aggregator, settings, clock=clock)
        self.corrections = CorrectionEngine(
            self.aggregator, depth=settings.correction_periods
        )
        self.expectations = ExpectationsService(focus, clock=clock)

    async def __aenter__(self) -> MacroDataService:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close owned HTTP clients."""
        for resource in self._owned:
            await resource.close()
        self._owned.clear()

    @property
    def config(self) -> MacroConfig:
        return self._config

    # --- Catalog ---

    def definitions(self) -> list[IndicatorDefinition]:
        return self.catalog.definitions()

    def definition(self, code: str) -> IndicatorDefinition | None:
        return self.catalog.resolve(code)

    def correction_indices(self) -> list[IndicatorDefinition]:
        """Indicators usable by the monetary correction calculator."""
        return self.catalog.compoundable()

    # --- Series ---

    async def get_series(self, code: str, periods: int | None = None) -> Series | None:
        """Series for ``code`` (None if unknown). Defaults to ``default_periods``."""
        if periods is None:
            periods = self._config.indicators.default_periods
        return await self.aggregator.get_series(code, periods)

    async def get_many(
        self, codes: list[str], periods: int = MULTI_SERIES_DEFAULT_PERIODS
    ) -> list[Series]:
        return await self.aggregator.get_many(codes, periods)

    # --- Summaries ---

    async def get_summary(self, code: str) -> SummaryResult | None:
        return await self.summaries.summarize(code)

    async def get_main_summaries(self) -> list[SummaryResult]:
        """Summaries for the dashboard's headline indicators."""
        return await self.summaries.summarize_many(self._config.indicators.main_codes)

    # --- Correction ---

    async def correct(
        self,
        code: str,
        value: float,
        start_period: str,
        end_period: str,
    ) -> CorrectionResult | CorrectionFailure:
        return await self.corrections.correct(code, value, start_period, end_period)

    # --- Focus ---

    async def focus_summary(self) -> list[FocusSummary]:
        return await self.expectations.summary()

    async def focus_expectations(self, indicator: str) -> list[FocusExpectation]:
        return await self.expectations.expectations(indicator)

    # --- Export ---

    async def export_csv(self, code: str, periods: int | None = None) -> CsvExport | None:
        """CSV export of a series, or None if the code is unknown."""
        definition = self.catalog.resolve(code)
        if definition is None:
            return None
        series = await self.get_series(definition.code, periods)
        if series is None:
            return None
        return render_csv(definition, series, self._clock())
