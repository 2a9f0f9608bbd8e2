"""Click-based CLI for sharpe-watch.

Thin wrapper around library modules. No business logic; every operation
delegates to the stock data service or the watch-list.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sharpe_watch.core.config import CONFIG_PATH_VAR

console = Console(stderr=True)

_PERIOD_LABELS = {
    "yesterday": "1D",
    "last_week": "1W",
    "last_month": "1M",
    "last_quarter": "3M",
    "last_semester": "6M",
    "last_year": "1Y",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from sharpe_watch.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _create_service(ctx: click.Context):
    """Build a StockDataService from the loaded config."""
    from sharpe_watch.services import create_service

    return create_service(_load_config(ctx))


def _open_watchlist(ctx: click.Context):
    """Open the JSON-backed watch-list named in config.

    A watch-list that was never saved starts with the configured lookback.
    """
    from sharpe_watch.watchlist import JsonWatchlistStore, Watchlist, WatchlistState

    config = _load_config(ctx)
    default = WatchlistState(lookback=config.analytics.default_lookback)
    return Watchlist(JsonWatchlistStore(config.watchlist.path, default=default))


def _resolve_tickers(raw: str | None) -> list[str]:
    """Parse and validate a comma-separated ticker string."""
    from sharpe_watch.core import InvalidInputError, validate_ticker_input

    try:
        return validate_ticker_input(raw)
    except InvalidInputError as e:
        raise click.UsageError(str(e)) from e


def _tickers_or_watchlist(ctx: click.Context, raw: str | None) -> list[str]:
    """Tickers from ``--tickers``, else the saved watch-list."""
    if raw:
        return _resolve_tickers(raw)
    tickers = _open_watchlist(ctx).tickers
    if not tickers:
        raise click.UsageError(
            "No tickers given and the watch-list is empty. "
            "Use --tickers or 'sharpe-watch watch add'."
        )
    return tickers


def _fmt(value: float | None, spec: str = ".4f") -> str:
    return "-" if value is None else format(value, spec)


def _print_errors(results) -> None:
    for r in results:
        if r.error:
            console.print(f"[yellow]{r.ticker}: {r.error}[/yellow]")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar=CONFIG_PATH_VAR,
    default=None,
    help="Path to sharpe-watch.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="sharpe-watch")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """sharpe-watch: rolling return, volatility and Sharpe ratio analytics."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )


# ---------------------------------------------------------------------------
# prices
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--tickers", "-t", type=str, required=True, help="Comma-separated tickers.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option("--tail", type=int, default=10, help="Rows per ticker in table output.")
@click.pass_context
def prices(ctx: click.Context, tickers: str, output_format: str, tail: int) -> None:
    """Fetch validated daily price history."""
    ticker_list = _resolve_tickers(tickers)
    service = _create_service(ctx)

    results = _run_async(service.fetch_many(ticker_list))

    if output_format == "json":
        click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    elif output_format == "csv":
        _output_prices_csv(results)
    else:
        _output_prices_table(results, tail)
        _print_errors(results)


def _output_prices_table(results, tail: int) -> None:
    """Render the most recent bars of each ticker as a Rich table."""
    for r in results:
        if r.error:
            continue
        table = Table(title=f"{r.ticker} ({r.days_count} days)")
        table.add_column("Date")
        table.add_column("Open", justify="right")
        table.add_column("High", justify="right")
        table.add_column("Low", justify="right")
        table.add_column("Close", justify="right", style="bold")
        table.add_column("Volume", justify="right")
        for p in r.historical_data[-tail:]:
            table.add_row(
                str(p.date),
                f"{p.open:.2f}",
                f"{p.high:.2f}",
                f"{p.low:.2f}",
                f"{p.close:.2f}",
                f"{p.volume:,.0f}",
            )
        console.print(table)


def _output_prices_csv(results) -> None:
    """Write price bars as CSV to stdout."""
    import csv
    import io

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["ticker", "date", "open", "high", "low", "close", "volume"])
    for r in results:
        for p in r.historical_data:
            writer.writerow([r.ticker, str(p.date), p.open, p.high, p.low, p.close, p.volume])
    click.echo(buf.getvalue(), nl=False)


# ---------------------------------------------------------------------------
# sharpe
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--tickers",
    "-t",
    type=str,
    default=None,
    help="Comma-separated tickers. Defaults to the watch-list.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def sharpe(ctx: click.Context, tickers: str | None, output_format: str) -> None:
    """Six-period Sharpe report per ticker."""
    ticker_list = _tickers_or_watchlist(ctx, tickers)

    service = _create_service(ctx)
    reports = _run_async(service.sharpe_reports(ticker_list))

    if output_format == "json":
        click.echo(json.dumps([r.model_dump(mode="json") for r in reports], indent=2))
    else:
        _output_sharpe_table(reports)
        _print_errors(reports)


def _output_sharpe_table(reports) -> None:
    """Render Sharpe ratios per period as a Rich table."""
    table = Table(title="Sharpe Ratios")
    table.add_column("Ticker", style="bold")
    for label in _PERIOD_LABELS.values():
        table.add_column(label, justify="right")

    for r in reports:
        if r.error:
            continue
        cells = [
            _fmt(m.sharpe_ratio if m is not None else None, ".3f")
            for m in r.periods().values()
        ]
        table.add_row(r.ticker, *cells)

    console.print(table)


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--tickers",
    "-t",
    type=str,
    default=None,
    help="Comma-separated tickers. Defaults to the watch-list.",
)
@click.option(
    "--lookback",
    "-l",
    type=int,
    default=None,
    help="Lookback in trading days (1-1000). Defaults to the watch-list lookback.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option("--tail", type=int, default=20, help="Rows per ticker in table output.")
@click.pass_context
def history(
    ctx: click.Context,
    tickers: str | None,
    lookback: int | None,
    output_format: str,
    tail: int,
) -> None:
    """Price history annotated with a rolling Sharpe signal."""
    from sharpe_watch.core import InvalidInputError, validate_lookback

    ticker_list = _tickers_or_watchlist(ctx, tickers)
    if lookback is None:
        lookback = _open_watchlist(ctx).lookback
    try:
        lookback = validate_lookback(lookback)
    except InvalidInputError as e:
        raise click.UsageError(str(e)) from e

    service = _create_service(ctx)
    results = _run_async(service.annotated_history(ticker_list, lookback))

    if output_format == "json":
        click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    elif output_format == "csv":
        _output_history_csv(results)
    else:
        _output_history_table(results, tail)
        _print_errors(results)


def _output_history_table(results, tail: int) -> None:
    """Render the most recent annotated points of each ticker."""
    for r in results:
        if r.error:
            continue
        table = Table(title=f"{r.ticker} (lookback {r.lookback})")
        table.add_column("Date")
        table.add_column("Close", justify="right", style="bold")
        table.add_column("Return %", justify="right")
        table.add_column("Std Dev", justify="right")
        table.add_column("Sharpe", justify="right")
        for p in r.historical_data[-tail:]:
            table.add_row(
                str(p.date),
                f"{p.close:.2f}",
                _fmt(p.trailing_return, ".2f"),
                _fmt(p.std_dev),
                _fmt(p.sharpe_ratio, ".3f"),
            )
        console.print(table)


def _output_history_csv(results) -> None:
    """Write annotated points as CSV to stdout."""
    import csv
    import io

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["ticker", "date", "close", "trailing_return", "std_dev", "sharpe_ratio"])
    for r in results:
        for p in r.historical_data:
            writer.writerow(
                [
                    r.ticker,
                    str(p.date),
                    p.close,
                    "" if p.trailing_return is None else p.trailing_return,
                    "" if p.std_dev is None else p.std_dev,
                    "" if p.sharpe_ratio is None else p.sharpe_ratio,
                ]
            )
    click.echo(buf.getvalue(), nl=False)


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


@cli.group()
def watch() -> None:
    """Manage the persisted watch-list."""


@watch.command("add")
@click.argument("tickers", nargs=-1, required=True)
@click.pass_context
def watch_add(ctx: click.Context, tickers: tuple[str, ...]) -> None:
    """Add one or more tickers."""
    watchlist = _open_watchlist(ctx)
    for ticker in tickers:
        if watchlist.add_ticker(ticker):
            console.print(f"[green]Added {ticker.strip().upper()}[/green]")
        else:
            console.print(f"[yellow]Skipped {ticker}: invalid, duplicate or list full[/yellow]")


@watch.command("remove")
@click.argument("tickers", nargs=-1, required=True)
@click.pass_context
def watch_remove(ctx: click.Context, tickers: tuple[str, ...]) -> None:
    """Remove one or more tickers."""
    watchlist = _open_watchlist(ctx)
    for ticker in tickers:
        if watchlist.remove_ticker(ticker):
            console.print(f"[green]Removed {ticker.strip().upper()}[/green]")
        else:
            console.print(f"[yellow]{ticker} is not on the watch-list[/yellow]")


@watch.command("list")
@click.pass_context
def watch_list(ctx: click.Context) -> None:
    """Show the watch-list."""
    watchlist = _open_watchlist(ctx)
    if not watchlist.tickers:
        console.print("[dim]Watch-list is empty.[/dim]")
    for ticker in watchlist.tickers:
        click.echo(ticker)
    console.print(f"Lookback: {watchlist.lookback} days")


@watch.command("clear")
@click.pass_context
def watch_clear(ctx: click.Context) -> None:
    """Remove every ticker."""
    _open_watchlist(ctx).clear()
    console.print("[green]Watch-list cleared[/green]")


@watch.command("lookback")
@click.argument("days", type=int)
@click.pass_context
def watch_lookback(ctx: click.Context, days: int) -> None:
    """Set the preferred lookback in trading days."""
    if not _open_watchlist(ctx).set_lookback(days):
        raise click.UsageError("Lookback must be between 1 and 1000")
    console.print(f"[green]Lookback set to {days} days[/green]")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address. Defaults to config.")
@click.option("--port", "-p", type=int, default=None, help="Port number. Defaults to config.")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]uvicorn not installed. Install with: "
            "pip install sharpe-watch[api][/red]"
        )
        raise SystemExit(1)

    config = _load_config(ctx)
    if ctx.obj.get("config_path"):
        # The app factory loads config itself in the server process
        os.environ[CONFIG_PATH_VAR] = ctx.obj["config_path"]
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting sharpe-watch API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "sharpe_watch.api.app:create_app",
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
