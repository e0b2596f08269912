"""Tests for brasil_macro.sources.base helpers and HttpSource."""

from __future__ import annotations

from datetime import date

import httpx
import pytest
import respx

from brasil_macro.core.exceptions import SourceError
from brasil_macro.sources.base import HttpSource, parse_decimal, shift_months

URL = "https://upstream.example/data"


@pytest.mark.unit
class TestParseDecimal:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("0.45", 0.45),
            ("0,45", 0.45),
            ("1.234,56", 1234.56),
            ("-0,12", -0.12),
            (3, 3.0),
            (2.5, 2.5),
        ],
    )
    def test_parses(self, raw, expected):
        assert parse_decimal(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "-", "...", "x", "abc", "nan", True])
    def test_unusable(self, raw):
        assert parse_decimal(raw) is None


@pytest.mark.unit
class TestShiftMonths:
    def test_backwards_across_year(self):
        assert shift_months(date(2024, 2, 20), -3) == date(2023, 11, 1)

    def test_forwards(self):
        assert shift_months(date(2024, 11, 5), 2) == date(2025, 1, 1)

    def test_zero_snaps_to_month_start(self):
        assert shift_months(date(2024, 6, 15), 0) == date(2024, 6, 1)


@pytest.fixture
async def source():
    async with HttpSource(timeout=5, rate_limit=100, user_agent="test") as s:
        yield s


@pytest.mark.unit
class TestHttpSource:
    @respx.mock
    async def test_get_json(self, source):
        respx.get(URL).mock(return_value=httpx.Response(200, json=[{"a": 1}]))
        assert await source._get_json(URL) == [{"a": 1}]

    @respx.mock
    async def test_http_error_raises_source_error(self, source):
        respx.get(URL).mock(return_value=httpx.Response(503))
        with pytest.raises(SourceError) as exc_info:
            await source._get_json(URL)
        assert exc_info.value.context["status_code"] == 503
        assert exc_info.value.context["url"] == URL

    @respx.mock
    async def test_transport_error_raises_source_error(self, source):
        respx.get(URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
        with pytest.raises(SourceError, match="failed") as exc_info:
            await source._get_json(URL)
        assert exc_info.value.context["status_code"] is None

    @respx.mock
    async def test_non_json_body(self, source):
        respx.get(URL).mock(return_value=httpx.Response(200, text="<html>"))
        with pytest.raises(SourceError, match="non-JSON"):
            await source._get_json(URL)

    async def test_external_client_not_closed(self):
        client = httpx.AsyncClient()
        source = HttpSource(timeout=5, rate_limit=1, user_agent="test", client=client)
        await source.close()
        assert not client.is_closed
        await client.aclose()
