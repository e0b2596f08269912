"""Indicator catalog: static definitions plus the code → upstream routing table.

The catalog is built once at startup and passed to whoever needs it.
Lookups of unknown codes return None; callers branch on presence.
"""

from __future__ import annotations

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from brasil_macro.core.exceptions import ConfigError
from brasil_macro.core.models import (
    IndicatorCategory,
    IndicatorCode,
    IndicatorDefinition,
    SeriesId,
    SourceName,
)
from brasil_macro.sources.bcb import BCB_SERIES
from brasil_macro.sources.sidra import SIDRA_TABLES


class IndicatorRoute(BaseModel):
    """Where an indicator's series lives upstream."""

    model_config = ConfigDict(frozen=True)

    source: SourceName
    series_id: SeriesId


class IndicatorCatalog:
    """Immutable lookup of indicator definitions and routes.

    Every definition must have exactly one route and vice versa; a
    mismatch is a configuration error raised at construction.
    """

    def __init__(
        self,
        definitions: list[IndicatorDefinition],
        routes: dict[IndicatorCode, IndicatorRoute],
    ) -> None:
        by_code: dict[IndicatorCode, IndicatorDefinition] = {}
        for definition in definitions:
            if definition.code in by_code:
                raise ConfigError(
                    f"Duplicate indicator code: {definition.code}",
                    context={"field": "code", "value": definition.code},
                )
            by_code[definition.code] = definition

        unrouted = set(by_code) - set(routes)
        orphaned = set(routes) - set(by_code)
        if unrouted or orphaned:
            raise ConfigError(
                "Indicator routes must cover exactly the defined codes",
                context={"unrouted": sorted(unrouted), "orphaned": sorted(orphaned)},
            )

        for code, route in routes.items():
            if route.source != by_code[code].source:
                raise ConfigError(
                    f"Route for {code} points to {route.source}, "
                    f"definition says {by_code[code].source}",
                    context={"field": "source", "value": code},
                )

        self._definitions = MappingProxyType(by_code)
        self._routes = MappingProxyType(dict(routes))

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and _normalize(code) in self._definitions

    def resolve(self, code: str) -> IndicatorDefinition | None:
        """Return the definition for ``code`` (case-insensitive), or None."""
        return self._definitions.get(_normalize(code))

    def route(self, code: str) -> IndicatorRoute | None:
        """Return the upstream route for ``code``, or None."""
        return self._routes.get(_normalize(code))

    def definitions(self) -> list[IndicatorDefinition]:
        """All definitions in registration order."""
        return list(self._definitions.values())

    def codes(self) -> list[IndicatorCode]:
        return list(self._definitions.keys())

    def compoundable(self) -> list[IndicatorDefinition]:
        """Definitions eligible for accumulation and monetary correction."""
        return [d for d in self._definitions.values() if d.compoundable]


def _normalize(code: str) -> str:
    return code.strip().upper()


def _bcb(series: str) -> IndicatorRoute:
    return IndicatorRoute(source=SourceName.BCB, series_id=BCB_SERIES[series])


def _ibge(table: str) -> IndicatorRoute:
    return IndicatorRoute(source=SourceName.IBGE, series_id=SIDRA_TABLES[table])


def _define(
    code: str,
    name: str,
    description: str,
    unit: str,
    source: SourceName,
    category: IndicatorCategory,
    compoundable: bool = False,
) -> IndicatorDefinition:
    return IndicatorDefinition(
        code=code,
        name=name,
        description=description,
        unit=unit,
        source=source,
        category=category,
        compoundable=compoundable,
    )


def build_default_catalog() -> IndicatorCatalog:
    """The dashboard's built-in indicator set."""
    bcb, ibge = SourceName.BCB, SourceName.IBGE
    cat = IndicatorCategory

    definitions = [
        # Inflation
        _define("IPCA", "IPCA", "Índice de Preços ao Consumidor Amplo", "%",
                ibge, cat.INFLATION, compoundable=True),
        _define("INPC", "INPC", "Índice Nacional de Preços ao Consumidor", "%",
                ibge, cat.INFLATION, compoundable=True),
        _define("IGP_M", "IGP-M", "Índice Geral de Preços - Mercado", "%",
                bcb, cat.INFLATION, compoundable=True),
        # Interest rates (monthly accumulated rate)
        _define("SELIC", "SELIC", "Taxa básica de juros", "% a.m.",
                bcb, cat.INTEREST, compoundable=True),
        _define("CDI", "CDI", "Certificado de Depósito Interbancário", "% a.m.",
                bcb, cat.INTEREST, compoundable=True),
        # Exchange rates
        _define("USD_BRL", "Dólar", "Cotação do dólar comercial (PTAX venda)", "R$",
                bcb, cat.EXCHANGE),
        _define("EUR_BRL", "Euro", "Cotação do euro", "R$",
                bcb, cat.EXCHANGE),
        # Economic activity
        _define("IBC_BR", "IBC-Br", "Índice de Atividade Econômica do BC", "índice",
                bcb, cat.ACTIVITY),
        _define("INDUSTRIAL", "Produção Industrial", "Variação da produção industrial", "%",
                ibge, cat.ACTIVITY),
        _define("RETAIL", "Vendas Varejo", "Variação das vendas do varejo", "%",
                ibge, cat.ACTIVITY),
        # Employment
        _define("UNEMPLOYMENT", "Desemprego", "Taxa de desocupação", "%",
                ibge, cat.EMPLOYMENT),
        # Fiscal
        _define("DEBT_GDP", "Dívida/PIB", "Dívida líquida do setor público", "% PIB",
                bcb, cat.FISCAL),
        _define("PRIMARY_RESULT", "Resultado Primário",
                "Resultado primário do setor público", "% PIB",
                bcb, cat.FISCAL),
        # External sector
        _define("TRADE_BALANCE", "Balança Comercial", "Saldo da balança comercial", "US$ Mi",
                bcb, cat.EXTERNAL),
        _define("CURRENT_ACCOUNT", "Trans. Correntes", "Saldo em transações correntes",
                "US$ Mi", bcb, cat.EXTERNAL),
    ]

    routes = {
        "IPCA": _ibge("IPCA"),
        "INPC": _ibge("INPC"),
        "IGP_M": _bcb("IGP_M"),
        "SELIC": _bcb("SELIC_MONTHLY"),
        "CDI": _bcb("CDI_MONTHLY"),
        "USD_BRL": _bcb("USD_BRL_SELL"),
        "EUR_BRL": _bcb("EUR_BRL"),
        "IBC_BR": _bcb("IBC_BR"),
        "INDUSTRIAL": _ibge("INDUSTRIAL_PRODUCTION"),
        "RETAIL": _ibge("RETAIL_SALES"),
        "UNEMPLOYMENT": _ibge("UNEMPLOYMENT"),
        "DEBT_GDP": _bcb("DEBT_GDP"),
        "PRIMARY_RESULT": _bcb("PRIMARY_RESULT"),
        "TRADE_BALANCE": _bcb("TRADE_BALANCE"),
        "CURRENT_ACCOUNT": _bcb("CURRENT_ACCOUNT"),
    }

    return IndicatorCatalog(definitions, routes)
