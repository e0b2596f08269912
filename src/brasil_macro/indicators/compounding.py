"""Compounding arithmetic over percentage-rate observations.

Every value is read as a period rate in percent, so a sequence of rates
r_1..r_n compounds to the factor Π(1 + r_i/100). Plain floats are used
throughout; nothing is rounded.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from brasil_macro.core.models import ObservationPoint


def compound_factor(rates: Iterable[float]) -> float:
    """Multiplicative factor of a sequence of percentage rates (1.0 if empty)."""
    factor = 1.0
    for rate in rates:
        factor *= 1 + rate / 100
    return factor


def factor_to_percent(factor: float) -> float:
    return (factor - 1) * 100


def accumulated(points: Sequence[ObservationPoint], months: int) -> float | None:
    """Compounded accumulation of the trailing ``months`` points, in percent.

    Returns None when fewer than ``months`` points are available.
    """
    if months < 1 or len(points) < months:
        return None
    return factor_to_percent(compound_factor(p.value for p in points[-months:]))


def accumulated_ytd(points: Sequence[ObservationPoint], year: int) -> float | None:
    """Compounded accumulation of the points falling in ``year``, in percent.

    Returns None when no point belongs to ``year``.
    """
    in_year = [p.value for p in points if p.year == year]
    if not in_year:
        return None
    return factor_to_percent(compound_factor(in_year))
