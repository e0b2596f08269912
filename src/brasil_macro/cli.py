"""Click-based CLI for brasil-macro.

Thin wrapper around MacroDataService. Every command
delegates to the service and only formats its output.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from brasil_macro.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _create_service(config):
    """Build the service from config."""
    from brasil_macro.service import MacroDataService

    return MacroDataService(config)


def _fmt(value: float | None, digits: int = 2) -> str:
    return "—" if value is None else f"{value:,.{digits}f}"


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


_FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="BRASIL_MACRO_CONFIG",
    default=None,
    help="Path to brasil-macro.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="brasil-macro")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Brasil Macro: Brazilian macroeconomic indicators from BCB and IBGE."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# indicators
# ---------------------------------------------------------------------------


@cli.command()
@_FORMAT_OPTION
@click.pass_context
def indicators(ctx: click.Context, output_format: str) -> None:
    """List the indicator catalog."""
    from brasil_macro.indicators import build_default_catalog

    definitions = build_default_catalog().definitions()

    if output_format == "json":
        _echo_json([d.model_dump(mode="json") for d in definitions])
        return

    table = Table(title="Indicators")
    table.add_column("Code", style="bold")
    table.add_column("Name")
    table.add_column("Unit")
    table.add_column("Source")
    table.add_column("Category")
    table.add_column("Compoundable", justify="center")
    for d in definitions:
        table.add_row(
            d.code, d.name, d.unit, d.source.value, d.category.value,
            "yes" if d.compoundable else "",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# series
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.option("--periods", "-n", type=int, default=None, help="Number of monthly periods.")
@_FORMAT_OPTION
@click.pass_context
def series(ctx: click.Context, code: str, periods: int | None, output_format: str) -> None:
    """Show the time series for CODE."""
    from brasil_macro.core.exceptions import InputValidationError

    config = _load_config(ctx)

    async def _run():
        async with _create_service(config) as service:
            return await service.get_series(code, periods)

    try:
        result = _run_async(_run())
    except InputValidationError as e:
        raise click.UsageError(str(e)) from e

    if result is None:
        console.print(f"[red]Unknown indicator: {code.upper()}[/red]")
        raise SystemExit(1)

    if output_format == "json":
        _echo_json(result.model_dump(mode="json"))
        return

    if result.is_empty:
        console.print(f"[yellow]No data available for {result.code}.[/yellow]")
        return

    table = Table(title=f"{result.name} ({result.code})")
    table.add_column("Period", style="bold")
    table.add_column("Date")
    table.add_column("Value", justify="right")
    for p in result.points:
        table.add_row(p.period_code, p.date.isoformat(), _fmt(p.value, 4))
    console.print(table)


# ---------------------------------------------------------------------------
# summary
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("codes", nargs=-1)
@_FORMAT_OPTION
@click.pass_context
def summary(ctx: click.Context, codes: tuple[str, ...], output_format: str) -> None:
    """Summarize CODES (default: the headline indicators)."""
    config = _load_config(ctx)

    async def _run():
        async with _create_service(config) as service:
            if codes:
                results = await service.summaries.summarize_many(list(codes))
            else:
                results = await service.get_main_summaries()
            return results, service.catalog

    results, catalog = _run_async(_run())

    unknown = [c for c in codes if catalog.resolve(c) is None]
    for code in unknown:
        console.print(f"[yellow]Unknown indicator: {code.upper()}[/yellow]")

    if output_format == "json":
        _echo_json([r.model_dump(mode="json") for r in results])
        return

    table = Table(title="Indicator Summary")
    table.add_column("Indicator", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("12M %", justify="right")
    table.add_column("YTD %", justify="right")
    table.add_column("Last update")
    for r in results:
        definition = catalog.resolve(r.code)
        table.add_row(
            f"{definition.name} ({definition.unit})" if definition else r.code,
            _fmt(r.current_value),
            _fmt(r.previous_value),
            _fmt(r.change),
            _fmt(r.accumulated_12m),
            _fmt(r.accumulated_ytd),
            r.last_update.isoformat() if r.last_update else "—",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# correct
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.argument("value", type=float)
@click.argument("start_period")
@click.argument("end_period")
@_FORMAT_OPTION
@click.pass_context
def correct(
    ctx: click.Context,
    code: str,
    value: float,
    start_period: str,
    end_period: str,
    output_format: str,
) -> None:
    """Correct VALUE by CODE from START_PERIOD to END_PERIOD (YYYYMM)."""
    from brasil_macro.core.exceptions import InputValidationError
    from brasil_macro.core.models import CorrectionFailure

    config = _load_config(ctx)

    async def _run():
        async with _create_service(config) as service:
            return await service.correct(code, value, start_period, end_period)

    try:
        outcome = _run_async(_run())
    except InputValidationError as e:
        raise click.UsageError(str(e)) from e

    if isinstance(outcome, CorrectionFailure):
        console.print(f"[red]{outcome.message} ({outcome.reason.value})[/red]")
        raise SystemExit(1)

    if output_format == "json":
        _echo_json(outcome.model_dump(mode="json"))
        return

    direction = "reverse (de-compounded)" if outcome.is_reverse else "forward"
    table = Table(title=f"Monetary Correction: {code.upper()} {start_period} → {end_period}")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Original value", _fmt(outcome.original_value))
    table.add_row("Corrected value", _fmt(outcome.corrected_value))
    table.add_row("Factor", f"{outcome.factor:.6f}")
    table.add_row("Change", f"{outcome.percent_change:.4f}%")
    table.add_row("Months", str(outcome.months))
    table.add_row("Direction", direction)
    console.print(table)


# ---------------------------------------------------------------------------
# focus
# ---------------------------------------------------------------------------


@cli.command()
@_FORMAT_OPTION
@click.pass_context
def focus(ctx: click.Context, output_format: str) -> None:
    """Show Focus market expectations for the headline indicators."""
    config = _load_config(ctx)

    async def _run():
        async with _create_service(config) as service:
            return await service.focus_summary()

    summaries = _run_async(_run())

    if output_format == "json":
        _echo_json([s.model_dump(mode="json") for s in summaries])
        return

    if not summaries:
        console.print("[yellow]No Focus expectations available.[/yellow]")
        return

    table = Table(title="Focus Market Expectations (median)")
    table.add_column("Indicator", style="bold")
    table.add_column("Year", justify="right")
    table.add_column("Median", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    for s in summaries:
        for p in s.projections:
            table.add_row(
                s.indicator, str(p.year), _fmt(p.median), _fmt(p.minimum), _fmt(p.maximum)
            )
        table.add_section()
    console.print(table)


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.option("--periods", "-n", type=int, default=None, help="Number of monthly periods.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write to this file instead of stdout.",
)
@click.pass_context
def export(ctx: click.Context, code: str, periods: int | None, output: str | None) -> None:
    """Export the series for CODE as CSV."""
    from brasil_macro.core.exceptions import InputValidationError

    config = _load_config(ctx)

    async def _run():
        async with _create_service(config) as service:
            return await service.export_csv(code, periods)

    try:
        result = _run_async(_run())
    except InputValidationError as e:
        raise click.UsageError(str(e)) from e

    if result is None:
        console.print(f"[red]Unknown indicator: {code.upper()}[/red]")
        raise SystemExit(1)

    if output is None:
        click.echo(result.content, nl=False)
        return

    Path(output).write_text(result.content, encoding="utf-8")
    console.print(f"[green]Wrote {output}[/green]")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: api.host).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default: api.port).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    config = _load_config(ctx)
    if host is None:
        host = config.api.host
    if port is None:
        port = config.api.port

    # create_app loads config on its own, also in the --reload worker
    config_path = ctx.obj.get("config_path")
    if config_path:
        os.environ["BRASIL_MACRO_CONFIG"] = str(Path(config_path).resolve())

    console.print(f"Starting brasil-macro API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "brasil_macro.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
