"""Tests for the indicator catalog."""

from __future__ import annotations

import pytest

from brasil_macro.core.exceptions import ConfigError
from brasil_macro.core.models import IndicatorCategory, IndicatorDefinition, SourceName
from brasil_macro.indicators.catalog import IndicatorCatalog, IndicatorRoute


def _definition(code: str, source: SourceName = SourceName.BCB) -> IndicatorDefinition:
    return IndicatorDefinition(
        code=code,
        name=code,
        description="",
        unit="%",
        source=source,
        category=IndicatorCategory.INFLATION,
    )


@pytest.mark.unit
class TestDefaultCatalog:
    def test_size(self, catalog):
        assert len(catalog) == 15

    def test_case_insensitive_lookup(self, catalog):
        assert catalog.resolve("ipca").code == "IPCA"
        assert catalog.route(" selic ").series_id == "4390"
        assert "usd_brl" in catalog

    def test_unknown_code(self, catalog):
        assert catalog.resolve("UNKNOWN_CODE") is None
        assert catalog.route("UNKNOWN_CODE") is None
        assert "UNKNOWN_CODE" not in catalog

    def test_routes(self, catalog):
        assert catalog.route("IPCA") == IndicatorRoute(
            source=SourceName.IBGE, series_id="1737/63"
        )
        assert catalog.route("USD_BRL") == IndicatorRoute(
            source=SourceName.BCB, series_id="10813"
        )
        assert catalog.route("UNEMPLOYMENT").series_id == "6381/4099"

    def test_compoundable_indices(self, catalog):
        codes = [d.code for d in catalog.compoundable()]
        assert codes == ["IPCA", "INPC", "IGP_M", "SELIC", "CDI"]

    def test_every_definition_routed_to_its_source(self, catalog):
        for definition in catalog.definitions():
            assert catalog.route(definition.code).source == definition.source

    def test_interest_rates_are_monthly(self, catalog):
        assert catalog.resolve("SELIC").unit == "% a.m."
        assert catalog.resolve("CDI").unit == "% a.m."


@pytest.mark.unit
class TestCatalogConstruction:
    def test_duplicate_code(self):
        route = IndicatorRoute(source=SourceName.BCB, series_id="1")
        with pytest.raises(ConfigError, match="Duplicate"):
            IndicatorCatalog([_definition("A"), _definition("A")], {"A": route})

    def test_unrouted_code(self):
        with pytest.raises(ConfigError, match="cover exactly") as exc_info:
            IndicatorCatalog([_definition("A")], {})
        assert exc_info.value.context["unrouted"] == ["A"]

    def test_orphan_route(self):
        route = IndicatorRoute(source=SourceName.BCB, series_id="1")
        with pytest.raises(ConfigError) as exc_info:
            IndicatorCatalog([_definition("A")], {"A": route, "B": route})
        assert exc_info.value.context["orphaned"] == ["B"]

    def test_source_mismatch(self):
        route = IndicatorRoute(source=SourceName.IBGE, series_id="1737/63")
        with pytest.raises(ConfigError, match="points to"):
            IndicatorCatalog([_definition("A", SourceName.BCB)], {"A": route})
