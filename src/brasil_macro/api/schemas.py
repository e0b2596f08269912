"""API-specific request/response schemas (Pydantic v2)."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


# -- Indicators --


class IndicatorResponse(BaseModel):
    """Catalog entry in API response format."""

    code: str
    name: str
    description: str
    unit: str
    source: str
    category: str
    compoundable: bool


class IndicatorSummaryResponse(IndicatorResponse):
    """Catalog entry merged with its latest analytics."""

    current_value: float | None = None
    previous_value: float | None = None
    change: float | None = None
    accumulated_12m: float | None = None
    accumulated_ytd: float | None = None
    last_update: date | None = None


class ObservationResponse(BaseModel):
    """One observation in a series response."""

    date: date
    value: float
    period_code: str


class SeriesResponse(BaseModel):
    """Time series for one indicator, ascending by date."""

    code: str
    name: str
    unit: str
    data: list[ObservationResponse]


# -- Calculator --


class CorrectionRequestBody(BaseModel):
    """Request body for POST /api/calculator/correct."""

    indicator_code: str = Field(..., min_length=1)
    value: float = Field(..., gt=0)
    start_period: str = Field(..., pattern=r"^[0-9]{6}$", description="YYYYMM")
    end_period: str = Field(..., pattern=r"^[0-9]{6}$", description="YYYYMM")


class CorrectionResponse(BaseModel):
    """Result of a monetary correction."""

    indicator_code: str
    original_value: float
    corrected_value: float
    factor: float
    percent_change: float
    months: int
    is_reverse: bool


class CorrectionIndexResponse(BaseModel):
    """An indicator usable for monetary correction."""

    code: str
    name: str
    description: str


# -- Export --


class CsvExportResponse(BaseModel):
    """CSV export payload."""

    filename: str
    content: str
    mime_type: str


# -- Health --


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
    indicators: int
