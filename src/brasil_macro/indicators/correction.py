"""Monetary correction by compounding a percentage-rate indicator.

Forward correction (start before end) multiplies the amount by the
compound factor of the window. Reverse correction (start after end)
divides by it, answering "what was today's amount worth back then".
The window is always the inclusive range between the two periods.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from brasil_macro.core.exceptions import InputValidationError
from brasil_macro.core.models import (
    CorrectionFailure,
    CorrectionRequest,
    CorrectionResult,
    FailureReason,
    PeriodCode,
    Series,
)
from brasil_macro.indicators.aggregator import SeriesAggregator
from brasil_macro.indicators.compounding import compound_factor, factor_to_percent

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Unable to compute the correction for the selected period"


def build_request(
    code: str, value: float, start_period: str, end_period: str
) -> CorrectionRequest:
    """Validate raw correction input.

    Raises:
        InputValidationError: On a non-positive value or a period that is
            not six digits.
    """
    try:
        return CorrectionRequest(
            code=code, value=value, start_period=start_period, end_period=end_period
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise InputValidationError(
            f"Invalid correction input: {first.get('msg')}",
            context={"field": field, "value": first.get("input")},
        ) from e


def correct_series(
    series: Series,
    value: float,
    start_period: PeriodCode,
    end_period: PeriodCode,
) -> CorrectionResult | None:
    """Apply the compound correction over ``series``.

    Returns None when no point falls within the window.
    """
    is_reverse = start_period > end_period
    period_start, period_end = (
        (end_period, start_period) if is_reverse else (start_period, end_period)
    )

    window = [p for p in series.points if period_start <= p.period_code <= period_end]
    if not window:
        return None

    factor = compound_factor(p.value for p in window)
    corrected = value / factor if is_reverse else value * factor

    return CorrectionResult(
        original_value=value,
        corrected_value=corrected,
        factor=factor,
        percent_change=factor_to_percent(factor),
        months=len(window),
        is_reverse=is_reverse,
    )


class CorrectionEngine:
    """Computes monetary corrections against freshly fetched series.

    Parameters
    ----------
    aggregator : SeriesAggregator
        Series source.
    depth : int
        Number of periods fetched for each correction.
    """

    def __init__(self, aggregator: SeriesAggregator, depth: int = 360) -> None:
        self._aggregator = aggregator
        self._depth = aggregator.validate_periods(depth)

    async def correct(
        self,
        code: str,
        value: float,
        start_period: str,
        end_period: str,
    ) -> CorrectionResult | CorrectionFailure:
        """Correct ``value`` from ``start_period`` to ``end_period``.

        Raises:
            InputValidationError: On malformed input or an indicator that is
                not a percentage rate. Raised before any fetch.
        """
        request = build_request(code, value, start_period, end_period)

        definition = self._aggregator.catalog.resolve(request.code)
        if definition is None:
            return CorrectionFailure(
                reason=FailureReason.NOT_FOUND,
                message=f"Unknown indicator: {request.code}",
            )
        if not definition.compoundable:
            raise InputValidationError(
                f"Indicator {definition.code} is not a percentage rate and "
                "cannot be used for monetary correction",
                context={"field": "code", "value": definition.code},
            )

        series = await self._aggregator.get_series(definition.code, self._depth)
        if series is None or series.is_empty:
            logger.info("No data for %s; correction not possible", definition.code)
            return CorrectionFailure(reason=FailureReason.NO_DATA, message=NO_DATA_MESSAGE)

        result = correct_series(
            series, request.value, request.start_period, request.end_period
        )
        if result is None:
            logger.info(
                "No %s observations between %s and %s",
                definition.code,
                request.start_period,
                request.end_period,
            )
            return CorrectionFailure(reason=FailureReason.NO_DATA, message=NO_DATA_MESSAGE)
        return result
