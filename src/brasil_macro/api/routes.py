"""FastAPI route definitions for the brasil-macro API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

import brasil_macro
from brasil_macro.api.deps import get_service
from brasil_macro.api.schemas import (
    CorrectionIndexResponse,
    CorrectionRequestBody,
    CorrectionResponse,
    CsvExportResponse,
    HealthResponse,
    IndicatorResponse,
    IndicatorSummaryResponse,
    ObservationResponse,
    SeriesResponse,
)
from brasil_macro.core.models import (
    CorrectionFailure,
    FailureReason,
    FocusExpectation,
    FocusSummary,
    IndicatorDefinition,
    Series,
    SummaryResult,
)
from brasil_macro.service import MacroDataService

router = APIRouter()


def _indicator_response(definition: IndicatorDefinition) -> IndicatorResponse:
    return IndicatorResponse(
        code=definition.code,
        name=definition.name,
        description=definition.description,
        unit=definition.unit,
        source=str(definition.source),
        category=str(definition.category),
        compoundable=definition.compoundable,
    )


def _summary_response(
    definition: IndicatorDefinition, summary: SummaryResult
) -> IndicatorSummaryResponse:
    return IndicatorSummaryResponse(
        **_indicator_response(definition).model_dump(),
        current_value=summary.current_value,
        previous_value=summary.previous_value,
        change=summary.change,
        accumulated_12m=summary.accumulated_12m,
        accumulated_ytd=summary.accumulated_ytd,
        last_update=summary.last_update,
    )


def _series_response(definition: IndicatorDefinition, series: Series) -> SeriesResponse:
    return SeriesResponse(
        code=series.code,
        name=series.name,
        unit=definition.unit,
        data=[
            ObservationResponse(date=p.date, value=p.value, period_code=p.period_code)
            for p in series.points
        ],
    )


def _require_definition(service: MacroDataService, code: str) -> IndicatorDefinition:
    definition = service.definition(code)
    if definition is None:
        raise HTTPException(
            status_code=404,
            detail=f"Indicator '{code.upper()}' not found",
        )
    return definition


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(service: MacroDataService = Depends(get_service)):
    """Service health and catalog size."""
    return HealthResponse(
        status="ok",
        version=brasil_macro.__version__,
        indicators=len(service.definitions()),
    )


# -- Indicators --


@router.get("/indicators", response_model=list[IndicatorResponse])
async def list_indicators(service: MacroDataService = Depends(get_service)):
    """All indicators known to the catalog."""
    return [_indicator_response(d) for d in service.definitions()]


@router.get("/indicators/summary", response_model=list[IndicatorSummaryResponse])
async def main_summaries(service: MacroDataService = Depends(get_service)):
    """Summaries of the dashboard's headline indicators."""
    summaries = await service.get_main_summaries()
    return [
        _summary_response(service.definition(s.code), s)
        for s in summaries
    ]


@router.get("/indicators/series", response_model=list[SeriesResponse])
async def multiple_series(
    codes: list[str] = Query(..., description="Indicator codes"),
    periods: int = Query(60, ge=1, le=360),
    service: MacroDataService = Depends(get_service),
):
    """Several series at once. Unknown codes are omitted."""
    series_list = await service.get_many(codes, periods)
    return [_series_response(service.definition(s.code), s) for s in series_list]


@router.get("/indicators/{code}", response_model=IndicatorResponse)
async def get_indicator(code: str, service: MacroDataService = Depends(get_service)):
    """Catalog entry for one indicator."""
    return _indicator_response(_require_definition(service, code))


@router.get("/indicators/{code}/summary", response_model=IndicatorSummaryResponse)
async def get_indicator_summary(
    code: str, service: MacroDataService = Depends(get_service)
):
    """Current value, change and accumulations for one indicator."""
    definition = _require_definition(service, code)
    summary = await service.get_summary(definition.code)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Indicator '{definition.code}' not found")
    return _summary_response(definition, summary)


@router.get("/indicators/{code}/series", response_model=SeriesResponse)
async def get_indicator_series(
    code: str,
    periods: int = Query(120, ge=1, le=360),
    service: MacroDataService = Depends(get_service),
):
    """Time series for one indicator. Empty ``data`` means no data upstream."""
    definition = _require_definition(service, code)
    series = await service.get_series(definition.code, periods)
    if series is None:
        raise HTTPException(status_code=404, detail=f"Indicator '{definition.code}' not found")
    return _series_response(definition, series)


# -- Calculator --


@router.get("/calculator/indices", response_model=list[CorrectionIndexResponse])
async def correction_indices(service: MacroDataService = Depends(get_service)):
    """Indicators available for monetary correction."""
    return [
        CorrectionIndexResponse(code=d.code, name=d.name, description=d.description)
        for d in service.correction_indices()
    ]


@router.post("/calculator/correct", response_model=CorrectionResponse)
async def correct_value(
    body: CorrectionRequestBody,
    service: MacroDataService = Depends(get_service),
):
    """Compound monetary correction between two YYYYMM periods."""
    outcome = await service.correct(
        body.indicator_code, body.value, body.start_period, body.end_period
    )
    if isinstance(outcome, CorrectionFailure):
        status = 404 if outcome.reason == FailureReason.NOT_FOUND else 422
        raise HTTPException(status_code=status, detail=outcome.message)

    return CorrectionResponse(
        indicator_code=body.indicator_code.strip().upper(),
        **outcome.model_dump(),
    )


# -- Focus --


@router.get("/focus/summary", response_model=list[FocusSummary])
async def focus_summary(service: MacroDataService = Depends(get_service)):
    """Latest market projections for the headline indicators."""
    return await service.focus_summary()


@router.get("/focus/{indicator}", response_model=list[FocusExpectation])
async def focus_indicator(
    indicator: str, service: MacroDataService = Depends(get_service)
):
    """Raw Focus survey rows for one indicator, newest first."""
    return await service.focus_expectations(indicator)


# -- Export --


@router.get("/export/{code}", response_model=CsvExportResponse)
async def export_csv(
    code: str,
    periods: int = Query(120, ge=1, le=360),
    service: MacroDataService = Depends(get_service),
):
    """Series rendered as CSV."""
    export = await service.export_csv(code, periods)
    if export is None:
        raise HTTPException(status_code=404, detail=f"Indicator '{code.upper()}' not found")
    return CsvExportResponse(
        filename=export.filename,
        content=export.content,
        mime_type=export.mime_type,
    )
