"""Indicator catalog, aggregation, summaries, and monetary correction."""

from brasil_macro.indicators.aggregator import SeriesAggregator, normalize_points
from brasil_macro.indicators.catalog import (
    IndicatorCatalog,
    IndicatorRoute,
    build_default_catalog,
)
from brasil_macro.indicators.compounding import (
    accumulated,
    accumulated_ytd,
    compound_factor,
)
from brasil_macro.indicators.correction import CorrectionEngine, correct_series
from brasil_macro.indicators.expectations import ExpectationsService, latest_projections
from brasil_macro.indicators.export import render_csv
from brasil_macro.indicators.summary import SummaryCalculator, summarize_series

__all__ = [
    "CorrectionEngine",
    "ExpectationsService",
    "IndicatorCatalog",
    "IndicatorRoute",
    "SeriesAggregator",
    "SummaryCalculator",
    "accumulated",
    "accumulated_ytd",
    "build_default_catalog",
    "compound_factor",
    "correct_series",
    "latest_projections",
    "normalize_points",
    "render_csv",
    "summarize_series",
]
