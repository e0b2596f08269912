"""Tests for monetary correction."""

from __future__ import annotations

import pytest

from brasil_macro.core.exceptions import InputValidationError
from brasil_macro.core.models import (
    CorrectionFailure,
    CorrectionResult,
    FailureReason,
    FetchResult,
    Series,
)
from brasil_macro.indicators.correction import (
    NO_DATA_MESSAGE,
    CorrectionEngine,
    build_request,
    correct_series,
)

IPCA_TABLE = "1737/63"
THREE_MONTH_FACTOR = 1.005 * 1.008 * 1.003


@pytest.fixture
def engine(aggregator) -> CorrectionEngine:
    return CorrectionEngine(aggregator, depth=360)


@pytest.fixture
def ipca_q1(ibge_adapter, make_points):
    """IPCA at 0.5, 0.8 and 0.3 for Jan-Mar 2023."""
    ibge_adapter.results[IPCA_TABLE] = FetchResult.success(
        make_points(2023, 1, [0.5, 0.8, 0.3])
    )
    return ibge_adapter


@pytest.mark.unit
class TestBuildRequest:
    def test_valid(self):
        req = build_request("ipca", 1000, "202301", "202303")
        assert req.code == "IPCA"

    @pytest.mark.parametrize(
        "value, start, end, field",
        [
            (-100, "202301", "202303", "value"),
            (0, "202301", "202303", "value"),
            (1000, "2023", "202303", "start_period"),
            (1000, "202301", "2023-03", "end_period"),
        ],
    )
    def test_invalid(self, value, start, end, field):
        with pytest.raises(InputValidationError) as exc_info:
            build_request("IPCA", value, start, end)
        assert exc_info.value.context["field"] == field


@pytest.mark.unit
class TestCorrectSeries:
    def test_window_outside_series(self, make_points):
        series = Series(code="IPCA", name="IPCA", points=make_points(2023, 1, [0.5]))
        assert correct_series(series, 100, "202401", "202412") is None

    def test_partial_window_counts_available_months(self, make_points):
        series = Series(
            code="IPCA", name="IPCA", points=make_points(2023, 1, [0.5, 0.8, 0.3])
        )
        result = correct_series(series, 100, "202302", "202312")
        assert result.months == 2
        assert result.factor == pytest.approx(1.008 * 1.003)


@pytest.mark.unit
class TestCorrectionEngine:
    async def test_forward_correction(self, engine, ipca_q1):
        result = await engine.correct("IPCA", 1000, "202301", "202303")

        assert isinstance(result, CorrectionResult)
        assert result.factor == pytest.approx(THREE_MONTH_FACTOR)
        assert result.corrected_value == pytest.approx(1000 * THREE_MONTH_FACTOR)
        assert result.percent_change == pytest.approx((THREE_MONTH_FACTOR - 1) * 100)
        assert result.original_value == 1000
        assert result.months == 3
        assert result.is_reverse is False
        assert ipca_q1.calls == [(IPCA_TABLE, 360)]

    async def test_reverse_correction(self, engine, ipca_q1):
        result = await engine.correct("IPCA", 1016.15, "202303", "202301")

        assert result.is_reverse is True
        assert result.months == 3
        assert result.factor == pytest.approx(THREE_MONTH_FACTOR)
        assert result.corrected_value == pytest.approx(1016.15 / THREE_MONTH_FACTOR)
        assert result.corrected_value == pytest.approx(1000, abs=0.1)

    async def test_forward_then_reverse_round_trips(self, engine, ipca_q1):
        forward = await engine.correct("IPCA", 2500, "202301", "202303")
        back = await engine.correct("IPCA", forward.corrected_value, "202303", "202301")
        assert back.corrected_value == pytest.approx(2500, rel=1e-12)

    async def test_single_month_factor_is_exact(self, engine, ipca_q1):
        result = await engine.correct("IPCA", 100, "202302", "202302")
        assert result.months == 1
        assert result.factor == 1 + 0.8 / 100
        assert result.is_reverse is False

    async def test_code_is_case_insensitive(self, engine, ipca_q1):
        result = await engine.correct("ipca", 1000, "202301", "202303")
        assert isinstance(result, CorrectionResult)

    async def test_short_period_rejected_before_fetch(self, engine, ipca_q1):
        with pytest.raises(InputValidationError):
            await engine.correct("IPCA", 1000, "2023", "202303")
        assert ipca_q1.calls == []

    async def test_negative_value_rejected_before_fetch(self, engine, ipca_q1):
        with pytest.raises(InputValidationError):
            await engine.correct("IPCA", -100, "202301", "202303")
        assert ipca_q1.calls == []

    async def test_unknown_code_is_not_found(self, engine, bcb_adapter, ibge_adapter):
        result = await engine.correct("UNKNOWN_CODE", 1000, "202301", "202303")
        assert isinstance(result, CorrectionFailure)
        assert result.reason == FailureReason.NOT_FOUND
        assert bcb_adapter.calls == []
        assert ibge_adapter.calls == []

    async def test_non_rate_indicator_rejected(self, engine, bcb_adapter):
        with pytest.raises(InputValidationError, match="USD_BRL") as exc_info:
            await engine.correct("USD_BRL", 1000, "202301", "202303")
        assert exc_info.value.context["field"] == "code"
        assert bcb_adapter.calls == []

    async def test_empty_series_is_no_data(self, engine, ibge_adapter):
        ibge_adapter.results[IPCA_TABLE] = FetchResult.failure("HTTP 500 from ibge")
        result = await engine.correct("IPCA", 1000, "202301", "202303")
        assert result == CorrectionFailure(
            reason=FailureReason.NO_DATA, message=NO_DATA_MESSAGE
        )

    async def test_window_without_points_is_no_data(self, engine, ipca_q1):
        result = await engine.correct("IPCA", 1000, "202401", "202406")
        assert isinstance(result, CorrectionFailure)
        assert result.reason == FailureReason.NO_DATA

    async def test_selic_from_bcb(self, engine, bcb_adapter, make_points):
        bcb_adapter.results["4390"] = FetchResult.success(
            make_points(2024, 1, [0.97, 0.80, 0.83])
        )
        result = await engine.correct("SELIC", 10000, "202401", "202403")
        assert result.corrected_value == pytest.approx(10000 * 1.0097 * 1.008 * 1.0083)

    def test_depth_validated(self, aggregator):
        with pytest.raises(InputValidationError):
            CorrectionEngine(aggregator, depth=0)
