"""brasil_macro.core: Foundation types, config, and exceptions."""

from brasil_macro.core.config import (
    APIConfig,
    BCBConfig,
    IndicatorsConfig,
    MacroConfig,
    SidraConfig,
    load_config,
)
from brasil_macro.core.exceptions import (
    BrasilMacroError,
    ConfigError,
    InputValidationError,
    SourceError,
)
from brasil_macro.core.models import (
    CorrectionFailure,
    CorrectionRequest,
    CorrectionResult,
    CsvExport,
    FailureReason,
    FetchResult,
    FocusExpectation,
    FocusProjection,
    FocusSummary,
    IndicatorCategory,
    IndicatorCode,
    IndicatorDefinition,
    ObservationPoint,
    PeriodCode,
    Series,
    SeriesId,
    SourceName,
    SummaryResult,
    format_period_code,
    is_period_code,
)

__all__ = [
    # Type aliases
    "IndicatorCode",
    "PeriodCode",
    "SeriesId",
    # Enums
    "SourceName",
    "IndicatorCategory",
    "FailureReason",
    # Observation models
    "ObservationPoint",
    "FetchResult",
    "Series",
    # Catalog models
    "IndicatorDefinition",
    # Result models
    "SummaryResult",
    "CorrectionRequest",
    "CorrectionResult",
    "CorrectionFailure",
    "FocusExpectation",
    "FocusProjection",
    "FocusSummary",
    "CsvExport",
    # Helpers
    "format_period_code",
    "is_period_code",
    # Config
    "MacroConfig",
    "BCBConfig",
    "SidraConfig",
    "IndicatorsConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "BrasilMacroError",
    "ConfigError",
    "InputValidationError",
    "SourceError",
]
