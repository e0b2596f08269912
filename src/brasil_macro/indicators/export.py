"""CSV rendering of indicator series."""

from __future__ import annotations

import csv
import io
from datetime import date

from brasil_macro.core.models import CsvExport, IndicatorDefinition, Series


def render_csv(definition: IndicatorDefinition, series: Series, today: date) -> CsvExport:
    """Render ``series`` as a two-column CSV: period date and value.

    Values are written with full float precision.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Data", f"{definition.name} ({definition.unit})"])
    for point in series.points:
        writer.writerow([point.date.isoformat(), repr(point.value)])

    return CsvExport(
        filename=f"{definition.code}_{today.isoformat()}.csv",
        content=buffer.getvalue(),
    )
