"""Client for the BCB Focus market expectations service (Olinda OData)."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from brasil_macro.core.config import BCBConfig
from brasil_macro.core.exceptions import SourceError
from brasil_macro.core.models import FocusExpectation
from brasil_macro.sources.base import HttpSource

logger = logging.getLogger(__name__)

_PAGE_SIZE = 1000


class FocusClient(HttpSource):
    """Fetches annual market expectations, newest survey first."""

    source_name = "focus"

    def __init__(self, config: BCBConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(
            timeout=config.focus_timeout,
            rate_limit=config.rate_limit,
            user_agent=config.user_agent,
            client=client,
        )
        self._url = config.focus_url

    async def fetch_expectations(self, indicator: str | None = None) -> list[FocusExpectation]:
        """Return expectation rows ordered by survey date descending.

        Failures and malformed payloads yield an empty list.
        """
        params = {
            "$top": str(_PAGE_SIZE),
            "$orderby": "Data desc",
            "$format": "json",
        }
        if indicator:
            escaped = indicator.replace("'", "''")
            params["$filter"] = f"Indicador eq '{escaped}'"

        try:
            raw = await self._get_json(self._url, params)
        except SourceError as e:
            logger.warning("Focus expectations unavailable for %r: %s", indicator, e)
            return []

        rows = raw.get("value") if isinstance(raw, dict) else None
        if not isinstance(rows, list):
            logger.warning("Focus returned an unexpected payload for %r", indicator)
            return []

        expectations: list[FocusExpectation] = []
        for row in rows:
            try:
                expectations.append(FocusExpectation.model_validate(row))
            except ValidationError:
                logger.debug("Dropping malformed Focus row: %r", row)
        return expectations
