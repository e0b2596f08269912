"""Unit tests for brasil_macro.core.config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from brasil_macro.core.config import (
    BCBConfig,
    IndicatorsConfig,
    MacroConfig,
    SidraConfig,
    _auto_cast,
    load_config,
)
from brasil_macro.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and working directory."""
    import os

    for key in list(os.environ):
        if key.startswith("BRASIL_MACRO_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.mark.unit
class TestDefaults:
    def test_defaults(self):
        config = MacroConfig()
        assert config.bcb.base_url == "https://api.bcb.gov.br/dados/serie/bcdata.sgs"
        assert config.bcb.request_timeout == 30
        assert config.bcb.focus_timeout == 15
        assert config.sidra.base_url == "https://apisidra.ibge.gov.br/values"
        assert config.indicators.display_periods == 24
        assert config.indicators.accumulation_periods == 120
        assert config.indicators.correction_periods == 360
        assert config.indicators.max_periods == 360
        assert "IPCA" in config.indicators.main_codes

    def test_url_trailing_slash_stripped(self):
        assert BCBConfig(base_url="https://example.org/sgs/").base_url == (
            "https://example.org/sgs"
        )

    def test_url_must_be_http(self):
        with pytest.raises(ValidationError, match="http"):
            SidraConfig(base_url="ftp://apisidra.ibge.gov.br")

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError, match="between 1 and 120"):
            BCBConfig(request_timeout=0)

    def test_display_periods_needs_two(self):
        with pytest.raises(ValidationError, match="display_periods"):
            IndicatorsConfig(display_periods=1)

    def test_accumulation_needs_a_year(self):
        with pytest.raises(ValidationError, match="accumulation_periods"):
            IndicatorsConfig(accumulation_periods=6)

    def test_depth_cannot_exceed_max(self):
        with pytest.raises(ValidationError, match="max_periods"):
            IndicatorsConfig(correction_periods=400)

    def test_main_codes_normalized(self):
        config = IndicatorsConfig(main_codes=[" ipca", "selic ", ""])
        assert config.main_codes == ["IPCA", "SELIC"]


@pytest.mark.unit
class TestLoadConfig:
    def test_no_file_uses_defaults(self):
        assert load_config() == MacroConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yml"
        path.write_text(
            "bcb:\n  request_timeout: 10\nindicators:\n  display_periods: 12\n"
        )
        config = load_config(config_path=str(path))
        assert config.bcb.request_timeout == 10
        assert config.indicators.display_periods == 12

    def test_default_file_in_cwd(self, tmp_path):
        (tmp_path / "brasil-macro.yml").write_text("sidra:\n  rate_limit: 2\n")
        assert load_config().sidra.rate_limit == 2

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yml"
        path.write_text("bcb:\n  request_timeout: 10\n")
        monkeypatch.setenv("BRASIL_MACRO_BCB__REQUEST_TIMEOUT", "45")
        config = load_config(config_path=str(path))
        assert config.bcb.request_timeout == 45

    def test_env_list_value(self, monkeypatch):
        monkeypatch.setenv("BRASIL_MACRO_INDICATORS__MAIN_CODES", "ipca,selic")
        assert load_config().indicators.main_codes == ["IPCA", "SELIC"]

    def test_config_env_var_points_to_file(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yml"
        path.write_text("api:\n  port: 9000\n")
        monkeypatch.setenv("BRASIL_MACRO_CONFIG", str(path))
        assert load_config().api.port == 9000

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found") as exc_info:
            load_config(config_path=str(tmp_path / "missing.yml"))
        assert exc_info.value.context["field"] == "config_path"

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path=str(path))

    def test_invalid_value_wrapped(self, monkeypatch):
        monkeypatch.setenv("BRASIL_MACRO_BCB__RATE_LIMIT", "0")
        with pytest.raises(ConfigError, match="rate_limit"):
            load_config()


@pytest.mark.unit
class TestAutoCast:
    @pytest.mark.parametrize(
        "raw, expected",
        [("true", True), ("False", False), ("42", 42), ("1.5", 1.5), ("abc", "abc")],
    )
    def test_cast(self, raw, expected):
        assert _auto_cast(raw) == expected
