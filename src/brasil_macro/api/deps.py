"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from brasil_macro.core.config import MacroConfig
from brasil_macro.service import MacroDataService


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: MacroConfig
    service: MacroDataService
    owns_service: bool = True


def get_service(request: Request) -> MacroDataService:
    """Dependency: retrieve the indicator service."""
    return request.app.state.app_state.service
