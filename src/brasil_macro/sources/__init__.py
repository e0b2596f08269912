"""Upstream source adapters.

    Upstream JSON → SourceAdapter → FetchResult → SeriesAggregator

Built-in implementations:

- ``BCBSeriesAdapter``: central bank SGS time series.
- ``SidraAdapter``: IBGE SIDRA aggregate tables.
- ``FocusClient``: central bank Focus market expectations.

Adding a new source: subclass ``HttpSource``, implement
``fetch(series_id, *, periods, start, end) -> FetchResult`` and register it
under a ``SourceName`` when building the aggregator.
"""

from brasil_macro.sources.base import (
    HttpSource,
    SourceAdapter,
    parse_decimal,
    shift_months,
)
from brasil_macro.sources.bcb import (
    BCB_SERIES,
    DAILY_SERIES,
    BCBSeriesAdapter,
    parse_sgs_records,
)
from brasil_macro.sources.focus import FocusClient
from brasil_macro.sources.sidra import SIDRA_TABLES, SidraAdapter, parse_sidra_rows

__all__ = [
    # Protocols
    "SourceAdapter",
    "HttpSource",
    # Central bank
    "BCB_SERIES",
    "DAILY_SERIES",
    "BCBSeriesAdapter",
    "FocusClient",
    "parse_sgs_records",
    # IBGE
    "SIDRA_TABLES",
    "SidraAdapter",
    "parse_sidra_rows",
    # Helpers
    "parse_decimal",
    "shift_months",
]
