"""Shared pytest fixtures for brasil-macro."""

from __future__ import annotations

from datetime import date

import pytest

from brasil_macro.core.config import MacroConfig
from brasil_macro.core.models import (
    FetchResult,
    FocusExpectation,
    ObservationPoint,
    SourceName,
)
from brasil_macro.indicators.aggregator import SeriesAggregator
from brasil_macro.indicators.catalog import build_default_catalog
from brasil_macro.service import MacroDataService

FIXED_TODAY = date(2024, 6, 15)


class FakeAdapter:
    """In-memory SourceAdapter keyed by series id.

    Unknown series ids answer with an empty successful fetch. ``raises``
    makes every fetch raise that exception instead.
    """

    def __init__(self, results: dict[str, FetchResult] | None = None, raises=None):
        self.results = dict(results or {})
        self.raises = raises
        self.calls: list[tuple[str, int | None]] = []
        self.closed = False

    async def fetch(self, series_id, *, periods=None, start=None, end=None):
        self.calls.append((series_id, periods))
        if self.raises is not None:
            raise self.raises
        result = self.results.get(series_id, FetchResult.success([]))
        if result.ok and periods is not None and len(result.points) > periods:
            return FetchResult.success(result.points[-periods:])
        return result

    async def close(self):
        self.closed = True


class FakeFocusClient:
    """Stand-in for FocusClient returning canned rows per indicator."""

    def __init__(self, rows: dict[str, list[FocusExpectation]] | None = None):
        self.rows = dict(rows or {})
        self.calls: list[str | None] = []
        self.closed = False

    async def fetch_expectations(self, indicator=None):
        self.calls.append(indicator)
        return list(self.rows.get(indicator, []))

    async def close(self):
        self.closed = True


def monthly_points(
    year: int, month: int, values: list[float]
) -> list[ObservationPoint]:
    """Consecutive monthly points starting at ``year``/``month``."""
    points = []
    for offset, value in enumerate(values):
        index = year * 12 + (month - 1) + offset
        points.append(ObservationPoint.for_month(index // 12, index % 12 + 1, value))
    return points


@pytest.fixture
def make_points():
    return monthly_points


@pytest.fixture
def fixed_today() -> date:
    return FIXED_TODAY


@pytest.fixture
def config() -> MacroConfig:
    return MacroConfig()


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def bcb_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def ibge_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def adapters(bcb_adapter, ibge_adapter):
    return {SourceName.BCB: bcb_adapter, SourceName.IBGE: ibge_adapter}


@pytest.fixture
def aggregator(catalog, adapters) -> SeriesAggregator:
    return SeriesAggregator(catalog, adapters)


@pytest.fixture
def focus_client() -> FakeFocusClient:
    return FakeFocusClient()


@pytest.fixture
def service(config, catalog, adapters, focus_client, fixed_today) -> MacroDataService:
    return MacroDataService(
        config,
        catalog=catalog,
        adapters=adapters,
        focus=focus_client,
        clock=lambda: fixed_today,
    )
