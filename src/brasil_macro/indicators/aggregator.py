"""Series aggregation: catalog routing + adapter fetch + canonical ordering."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping

from brasil_macro.core.exceptions import InputValidationError, SourceError
from brasil_macro.core.models import FetchResult, ObservationPoint, Series, SourceName
from brasil_macro.indicators.catalog import IndicatorCatalog
from brasil_macro.sources.base import SourceAdapter

logger = logging.getLogger(__name__)

MIN_PERIODS = 1
DEFAULT_MAX_PERIODS = 360


def normalize_points(points: Iterable[ObservationPoint]) -> list[ObservationPoint]:
    """Sort points by date ascending and collapse duplicate periods.

    Adapters are not trusted to return ordered data. When two points share
    a period code, the one appearing later in the input wins.
    """
    by_period: dict[str, ObservationPoint] = {}
    for point in points:
        by_period[point.period_code] = point
    return sorted(by_period.values(), key=lambda p: (p.date, p.period_code))


class SeriesAggregator:
    """Produces one canonical ``Series`` per indicator code.

    Parameters
    ----------
    catalog : IndicatorCatalog
        Definitions and routes, shared read-only.
    adapters : Mapping[SourceName, SourceAdapter]
        One adapter per upstream the catalog routes to.
    max_periods : int
        Upper bound for ``periods``; requests outside ``[1, max_periods]``
        are rejected before any fetch.
    """

    def __init__(
        self,
        catalog: IndicatorCatalog,
        adapters: Mapping[SourceName, SourceAdapter],
        max_periods: int = DEFAULT_MAX_PERIODS,
    ) -> None:
        self._catalog = catalog
        self._adapters = dict(adapters)
        self._max_periods = max_periods

    @property
    def catalog(self) -> IndicatorCatalog:
        return self._catalog

    @property
    def max_periods(self) -> int:
        return self._max_periods

    def validate_periods(self, periods: int) -> int:
        """Reject period counts outside ``[1, max_periods]``.

        Raises:
            InputValidationError: If ``periods`` is out of range.
        """
        if (
            isinstance(periods, bool)
            or not isinstance(periods, int)
            or not MIN_PERIODS <= periods <= self._max_periods
        ):
            raise InputValidationError(
                f"periods must be an integer in [{MIN_PERIODS}, {self._max_periods}], "
                f"got {periods!r}",
                context={"field": "periods", "value": periods},
            )
        return periods

    async def get_series(self, code: str, periods: int) -> Series | None:
        """Fetch the series for ``code``.

        Returns:
            None if the code is unknown (nothing is fetched). Otherwise a
            Series, empty when the upstream has no data or failed.

        Raises:
            InputValidationError: If ``periods`` is out of range.
        """
        self.validate_periods(periods)

        definition = self._catalog.resolve(code)
        route = self._catalog.route(code)
        if definition is None or route is None:
            logger.debug("Unknown indicator code %r", code)
            return None

        adapter = self._adapters.get(route.source)
        if adapter is None:
            logger.error(
                "No adapter registered for source %s (indicator %s)",
                route.source,
                definition.code,
            )
            return Series(code=definition.code, name=definition.name, points=[])

        try:
            result = await adapter.fetch(route.series_id, periods=periods)
        except SourceError as e:
            result = FetchResult.failure(str(e))
        except Exception as e:
            logger.warning(
                "Adapter for %s raised %s", route.source, type(e).__name__, exc_info=True
            )
            result = FetchResult.failure(f"{type(e).__name__}: {e}")
        if not result.ok:
            logger.warning(
                "Fetch for %s (%s %s) failed, serving empty series: %s",
                definition.code,
                route.source,
                route.series_id,
                result.error,
            )

        return Series(
            code=definition.code,
            name=definition.name,
            points=normalize_points(result.points),
        )

    async def get_many(self, codes: list[str], periods: int) -> list[Series]:
        """Fetch several series concurrently, skipping unknown codes.

        Order follows ``codes``.
        """
        self.validate_periods(periods)
        results = await asyncio.gather(*(self.get_series(code, periods) for code in codes))
        return [s for s in results if s is not None]
