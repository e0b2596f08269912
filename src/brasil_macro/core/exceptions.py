"""Custom exception hierarchy for brasil-macro.

Only contract violations are raised. "Indicator not found" and "no data"
are ordinary outcomes and are returned as values (``None``, an empty
``Series`` or a ``CorrectionFailure``).
"""

from typing import Any


class BrasilMacroError(Exception):
    """Base exception for all brasil-macro errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(BrasilMacroError):
    """Invalid or missing configuration.

    Raised by load_config() and by catalog construction during startup.
    Should be treated as fatal.

    Context keys:
        field: str, the config field that failed validation
        value: Any, the invalid value
    """


class InputValidationError(BrasilMacroError):
    """Malformed caller input (period format, amount, period count).

    Policy: reject the request immediately. Raised before any upstream
    fetch is attempted.

    Context keys:
        field: str, the offending input field
        value: Any, the rejected value
    """


class SourceError(BrasilMacroError):
    """Upstream fetch or decode failure inside a source adapter.

    Policy: never escapes an adapter. Adapters convert it into a failed
    FetchResult and the aggregator renders it as "no data".

    Context keys:
        source: str, "bcb", "ibge" or "focus"
        url: str, the URL that was being fetched
        status_code: int | None, HTTP status code if applicable
    """
