"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from brasil_macro.core.exceptions import ConfigError

_DEFAULT_USER_AGENT = "BrasilMacroData/1.0"


class BCBConfig(BaseModel):
    """Banco Central do Brasil access configuration (SGS series + Focus)."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.bcb.gov.br/dados/serie/bcdata.sgs"
    focus_url: str = (
        "https://olinda.bcb.gov.br/olinda/servico/Expectativas/versao/v1/odata/"
        "ExpectativasMercadoAnuais"
    )
    request_timeout: int = 30
    focus_timeout: int = 15
    rate_limit: int = 5
    user_agent: str = _DEFAULT_USER_AGENT

    @field_validator("request_timeout", "focus_timeout")
    @classmethod
    def timeout_bounded(cls, v: int) -> int:
        if v < 1 or v > 120:
            raise ValueError("timeouts must be between 1 and 120 seconds")
        return v

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit must be >= 1")
        return v

    @field_validator("base_url", "focus_url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"URL must be http(s), got {v!r}")
        return v.rstrip("/")


class SidraConfig(BaseModel):
    """IBGE SIDRA access configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://apisidra.ibge.gov.br/values"
    request_timeout: int = 20
    rate_limit: int = 5
    user_agent: str = _DEFAULT_USER_AGENT

    @field_validator("request_timeout")
    @classmethod
    def timeout_bounded(cls, v: int) -> int:
        if v < 1 or v > 120:
            raise ValueError("request_timeout must be between 1 and 120 seconds")
        return v

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit must be >= 1")
        return v

    @field_validator("base_url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"URL must be http(s), got {v!r}")
        return v.rstrip("/")


class IndicatorsConfig(BaseModel):
    """Fetch depths and dashboard defaults.

    ``display_periods`` feeds current/previous/change, ``accumulation_periods``
    feeds the 12-month and year-to-date accumulations. They are separate
    knobs so accumulations never run over a display-sized window.
    """

    model_config = ConfigDict(frozen=True)

    display_periods: int = 24
    accumulation_periods: int = 120
    correction_periods: int = 360
    default_periods: int = 120
    max_periods: int = 360
    main_codes: list[str] = [
        "IPCA",
        "SELIC",
        "CDI",
        "USD_BRL",
        "UNEMPLOYMENT",
        "IBC_BR",
        "IGP_M",
        "DEBT_GDP",
    ]

    @field_validator("display_periods")
    @classmethod
    def display_needs_two_points(cls, v: int) -> int:
        if v < 2:
            raise ValueError("display_periods must be >= 2")
        return v

    @field_validator("accumulation_periods")
    @classmethod
    def accumulation_covers_a_year(cls, v: int) -> int:
        if v < 12:
            raise ValueError("accumulation_periods must be >= 12")
        return v

    @field_validator("main_codes")
    @classmethod
    def codes_upper(cls, v: list[str]) -> list[str]:
        return [c.strip().upper() for c in v if c.strip()]

    @model_validator(mode="after")
    def depths_within_max(self) -> IndicatorsConfig:
        for name in (
            "display_periods",
            "accumulation_periods",
            "correction_periods",
            "default_periods",
        ):
            value = getattr(self, name)
            if value < 1 or value > self.max_periods:
                raise ValueError(
                    f"{name} ({value}) must be in [1, max_periods={self.max_periods}]"
                )
        return self


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]


class MacroConfig(BaseModel):
    """Root configuration for the entire brasil-macro system."""

    model_config = ConfigDict(frozen=True)

    bcb: BCBConfig = BCBConfig()
    sidra: SidraConfig = SidraConfig()
    indicators: IndicatorsConfig = IndicatorsConfig()
    api: APIConfig = APIConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "BRASIL_MACRO_",
) -> MacroConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (BRASIL_MACRO_BCB__REQUEST_TIMEOUT, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        BRASIL_MACRO_SIDRA__RATE_LIMIT=2  ->  sidra.rate_limit = 2
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return MacroConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("BRASIL_MACRO_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from BRASIL_MACRO_CONFIG not found: {env_path}",
                context={"field": "BRASIL_MACRO_CONFIG", "value": env_path},
            )
        return p

    default = Path("brasil-macro.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels. Comma-separated values
    become lists; everything else goes through _auto_cast.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        if "," in value:
            cast_value: object = [v.strip() for v in value.split(",") if v.strip()]
        else:
            cast_value = _auto_cast(value)

        # Nest into result dict, copying levels so `base` is never mutated
        target = result
        for part in parts[:-1]:
            existing = target.get(part)
            target[part] = dict(existing) if isinstance(existing, dict) else {}
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
