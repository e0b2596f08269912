"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brasil_macro.api.deps import AppState
from brasil_macro.api.routes import router
from brasil_macro.api.schemas import ErrorResponse
from brasil_macro.core.config import MacroConfig, load_config
from brasil_macro.core.exceptions import BrasilMacroError, ConfigError, InputValidationError
from brasil_macro.service import MacroDataService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config
    service = app.state._pending_service
    owns_service = service is None
    if service is None:
        service = MacroDataService(config)

    app.state.app_state = AppState(config=config, service=service, owns_service=owns_service)

    yield

    if owns_service:
        await service.close()


def create_app(
    config: MacroConfig | None = None,
    service: MacroDataService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    A pre-built ``service`` is used as-is and is not closed on shutdown.
    With neither argument, config comes from ``load_config()``, which honours
    ``BRASIL_MACRO_CONFIG``.
    """
    import brasil_macro

    app = FastAPI(
        title="Brasil Macro API",
        description="Brazilian macroeconomic indicators and monetary correction",
        version=brasil_macro.__version__,
        lifespan=lifespan,
    )

    if config is None:
        config = service.config if service is not None else load_config()

    # Stash config/service so lifespan can retrieve them
    app.state._pending_config = config
    app.state._pending_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    # Exception handlers
    @app.exception_handler(BrasilMacroError)
    async def macro_exception_handler(request: Request, exc: BrasilMacroError):
        status_map = {
            InputValidationError: 422,
            ConfigError: 500,
        }
        status = status_map.get(type(exc), 500)
        return JSONResponse(
            status_code=status,
            content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
        )

    return app
