"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

import math
import re
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Type Aliases ---

IndicatorCode = str
PeriodCode = str
SeriesId = str

_PERIOD_CODE_RE = re.compile(r"[0-9]{6}")


def format_period_code(year: int, month: int) -> PeriodCode:
    """Canonical ``YYYYMM`` key for a calendar month."""
    return f"{year:04d}{month:02d}"


def is_period_code(value: str) -> bool:
    """True if ``value`` is exactly six ASCII digits."""
    return _PERIOD_CODE_RE.fullmatch(value) is not None


# --- Enumerations ---


class SourceName(StrEnum):
    """Upstream services a series can be routed to."""

    BCB = "bcb"
    IBGE = "ibge"


class IndicatorCategory(StrEnum):
    """Dashboard grouping for indicators."""

    INFLATION = "inflation"
    INTEREST = "interest"
    EXCHANGE = "exchange"
    ACTIVITY = "activity"
    EMPLOYMENT = "employment"
    FISCAL = "fiscal"
    EXTERNAL = "external"


class FailureReason(StrEnum):
    """Why a monetary correction could not be computed."""

    NOT_FOUND = "not_found"
    NO_DATA = "no_data"


# --- Observation Models ---


class ObservationPoint(BaseModel):
    """One observed value of an indicator for one monthly period.

    ``period_code``, ``year`` and ``month`` are derived from ``date`` when
    omitted. When supplied they must agree with it.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    value: float
    period_code: PeriodCode
    year: int
    month: int
    period_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def derive_period_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("date") is None:
            return data
        raw = data["date"]
        d = date.fromisoformat(raw) if isinstance(raw, str) else raw
        if not isinstance(d, date):
            return data
        derived = dict(data)
        derived.setdefault("period_code", format_period_code(d.year, d.month))
        derived.setdefault("year", d.year)
        derived.setdefault("month", d.month)
        return derived

    @field_validator("value")
    @classmethod
    def value_is_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"value must be finite, got {v}")
        return v

    @model_validator(mode="after")
    def period_matches_date(self) -> ObservationPoint:
        if self.date.day != 1:
            raise ValueError(
                f"date must be the first day of its period, got {self.date}"
            )
        expected = format_period_code(self.date.year, self.date.month)
        if self.period_code != expected:
            raise ValueError(
                f"period_code ({self.period_code}) does not match date ({self.date})"
            )
        if (self.year, self.month) != (self.date.year, self.date.month):
            raise ValueError(
                f"year/month ({self.year}/{self.month}) do not match date ({self.date})"
            )
        return self

    @classmethod
    def for_month(
        cls,
        year: int,
        month: int,
        value: float,
        period_name: str | None = None,
    ) -> ObservationPoint:
        """Build the point for ``year``/``month`` dated on the first of the month."""
        return cls(date=date(year, month, 1), value=value, period_name=period_name)


class FetchResult(BaseModel):
    """Outcome of one adapter fetch.

    A successful fetch may still be empty. A failed fetch always is; its
    ``error`` describes the upstream problem for logging.
    """

    model_config = ConfigDict(frozen=True)

    points: list[ObservationPoint] = []
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, points: list[ObservationPoint]) -> FetchResult:
        return cls(points=points)

    @classmethod
    def failure(cls, error: str) -> FetchResult:
        return cls(points=[], error=error)


# --- Catalog Models ---


class IndicatorDefinition(BaseModel):
    """Static metadata for one indicator."""

    model_config = ConfigDict(frozen=True)

    code: IndicatorCode
    name: str
    description: str
    unit: str
    source: SourceName
    category: IndicatorCategory
    compoundable: bool = False

    @field_validator("code")
    @classmethod
    def code_is_upper(cls, v: str) -> str:
        if not v or v != v.strip().upper():
            raise ValueError(f"code must be a non-empty upper-case key, got {v!r}")
        return v


class Series(BaseModel):
    """An indicator's observations, strictly ascending by period."""

    model_config = ConfigDict(frozen=True)

    code: IndicatorCode
    name: str
    points: list[ObservationPoint] = []

    @model_validator(mode="after")
    def points_ascending(self) -> Series:
        for prev, cur in zip(self.points, self.points[1:]):
            if prev.period_code >= cur.period_code:
                raise ValueError(
                    f"points must be strictly ascending by period_code: "
                    f"{prev.period_code} precedes {cur.period_code}"
                )
        return self

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def latest(self) -> ObservationPoint | None:
        """Most recent point, or None for an empty series."""
        return self.points[-1] if self.points else None

    def period_codes(self) -> list[PeriodCode]:
        return [p.period_code for p in self.points]


# --- Derived Results ---


class SummaryResult(BaseModel):
    """Point-in-time analytics for one indicator."""

    model_config = ConfigDict(frozen=True)

    code: IndicatorCode
    current_value: float | None = None
    previous_value: float | None = None
    change: float | None = None
    accumulated_12m: float | None = None
    accumulated_ytd: float | None = None
    last_update: date | None = None


class CorrectionRequest(BaseModel):
    """Validated input for a monetary correction."""

    model_config = ConfigDict(frozen=True)

    code: IndicatorCode
    value: float
    start_period: PeriodCode
    end_period: PeriodCode

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("code must not be empty")
        return v

    @field_validator("value")
    @classmethod
    def value_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"value must be a positive number, got {v}")
        return v

    @field_validator("start_period", "end_period")
    @classmethod
    def period_format(cls, v: str) -> str:
        if not is_period_code(v):
            raise ValueError(f"period must match YYYYMM (6 digits), got {v!r}")
        return v

    @property
    def is_reverse(self) -> bool:
        return self.start_period > self.end_period


class CorrectionResult(BaseModel):
    """Outcome of a successful monetary correction."""

    model_config = ConfigDict(frozen=True)

    original_value: float
    corrected_value: float
    factor: float
    percent_change: float
    months: int
    is_reverse: bool


class CorrectionFailure(BaseModel):
    """Explicit failure of a monetary correction (unknown code or no data)."""

    model_config = ConfigDict(frozen=True)

    reason: FailureReason
    message: str


# --- Market Expectations (Focus survey) ---


class FocusExpectation(BaseModel):
    """One row of the Focus annual market expectations survey."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    indicator: str = Field(alias="Indicador")
    survey_date: date = Field(alias="Data")
    reference: str = Field(alias="DataReferencia")
    median: float | None = Field(default=None, alias="Mediana")
    mean: float | None = Field(default=None, alias="Media")
    minimum: float | None = Field(default=None, alias="Minimo")
    maximum: float | None = Field(default=None, alias="Maximo")
    respondents: int | None = Field(default=None, alias="numeroRespondentes")

    @property
    def reference_year(self) -> int | None:
        """Reference year, or None when the reference is not a plain year."""
        ref = self.reference.strip()
        return int(ref) if ref.isdigit() else None


class FocusProjection(BaseModel):
    """Latest projection for one reference year."""

    model_config = ConfigDict(frozen=True)

    year: int
    median: float | None = None
    mean: float | None = None
    minimum: float | None = None
    maximum: float | None = None


class FocusSummary(BaseModel):
    """Projections for one indicator across the coming years."""

    model_config = ConfigDict(frozen=True)

    indicator: str
    current_year: int
    next_year: int
    projections: list[FocusProjection]


# --- Export ---


class CsvExport(BaseModel):
    """A rendered CSV file ready to hand to a browser."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: str
    mime_type: str = "text/csv"
