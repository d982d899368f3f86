"""Click-based CLI for bbm-indonesia.

Thin wrapper around library modules: every command builds the same objects
the API builds at startup and delegates to them.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from bbm_indonesia.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


async def _aggregate(config, providers: tuple[str, ...]):
    """Run one aggregation outside the API and return the Snapshot."""
    from bbm_indonesia.core import SnapshotCache
    from bbm_indonesia.prices import ProviderAggregator
    from bbm_indonesia.providers import default_registry
    from bbm_indonesia.regions import RegionDirectory, RegionMatcher

    adapters = default_registry().create_enabled(config.providers)
    if providers:
        wanted = [p.lower() for p in providers]
        unknown = [p for p in wanted if p not in adapters]
        if unknown:
            raise click.UsageError(
                f"Unknown provider(s): {', '.join(unknown)}. "
                f"Available: {', '.join(adapters)}"
            )
        adapters = {k: adapters[k] for k in wanted}

    cache = SnapshotCache(default_ttl=config.cache.snapshot_ttl_seconds)
    async with RegionDirectory(config.regions, cache) as directory:
        aggregator = ProviderAggregator(
            RegionMatcher(directory),
            timeout_seconds=config.providers.timeout_seconds,
        )
        return await aggregator.aggregate(adapters)


def _snapshot_envelope(snapshot) -> dict:
    """The GET /prices response body for a Snapshot."""
    return {"success": True, "data": snapshot.model_dump(mode="json", by_alias=True)}


def _render_snapshot(snapshot) -> None:
    """Print a Snapshot as a rich table."""
    from bbm_indonesia.core import ProviderFailure

    table = Table(title=f"Fuel prices ({snapshot.last_updated:%Y-%m-%d %H:%M} UTC)")
    table.add_column("Provider", style="bold")
    table.add_column("Province")
    table.add_column("ID", justify="right")
    table.add_column("Product")
    table.add_column("Price (Rp)", justify="right")

    for key, entry in snapshot.providers.items():
        if isinstance(entry, ProviderFailure):
            table.add_row(key, "[red]error[/red]", "", entry.error, "")
            table.add_section()
            continue
        for record in entry:
            region = record.province_info
            if not record.products:
                table.add_row(key, record.province, region.id or "-", record.error or record.note or "", "")
            for fuel, price in record.products.items():
                table.add_row(key, region.name, region.id or "-", fuel, f"{price:,}")
        table.add_section()

    console.print(table)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="BBM_INDONESIA_CONFIG",
    default=None,
    help="Path to bbm-indonesia.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="bbm-indonesia")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """BBM Indonesia: fuel prices by provider and province."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# fetch
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--provider",
    "-p",
    "providers",
    multiple=True,
    help="Only run these providers (repeatable). Default: all enabled.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON to stdout.")
@click.pass_context
def fetch(ctx: click.Context, providers: tuple[str, ...], as_json: bool) -> None:
    """Scrape all providers once and print the merged prices."""
    config = _load_config(ctx)
    snapshot = _run_async(_aggregate(config, providers))

    if as_json:
        click.echo(json.dumps(_snapshot_envelope(snapshot), indent=2, ensure_ascii=False))
    else:
        _render_snapshot(snapshot)


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("public"),
    show_default=True,
    help="Site directory; prices are written to <output>/api/prices.json.",
)
@click.pass_context
def export(ctx: click.Context, output: Path) -> None:
    """Write a static prices.json for hosting without the API server."""
    config = _load_config(ctx)
    snapshot = _run_async(_aggregate(config, ()))

    target = output / "api" / "prices.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(_snapshot_envelope(snapshot), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )

    failed = snapshot.failed_providers()
    console.print(f"[green]Saved[/green] {target} ({len(snapshot.providers)} providers)")
    if failed:
        console.print(f"[yellow]Failed providers:[/yellow] {', '.join(failed)}")


# ---------------------------------------------------------------------------
# provinces
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def provinces(ctx: click.Context) -> None:
    """List canonical provinces from the region directory."""
    from bbm_indonesia.core import RegionDirectoryError, SnapshotCache
    from bbm_indonesia.regions import RegionDirectory

    config = _load_config(ctx)

    async def _run():
        async with RegionDirectory(config.regions, SnapshotCache()) as directory:
            return await directory.list_provinces()

    try:
        regions = _run_async(_run())
    except RegionDirectoryError as e:
        console.print(f"[red]Region directory unavailable:[/red] {e}")
        raise SystemExit(1)

    table = Table(title="Provinces")
    table.add_column("ID", justify="right", style="bold")
    table.add_column("Name")
    for region in regions:
        table.add_row(region.id, region.name)
    console.print(table)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: config api.host).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default: config api.port).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print("[red]uvicorn not installed. Install with: pip install uvicorn[/red]")
        raise SystemExit(1)

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    # The app factory reads its config file from the environment.
    if ctx.obj.get("config_path"):
        os.environ["BBM_INDONESIA_CONFIG"] = str(ctx.obj["config_path"])

    console.print(f"Starting bbm-indonesia API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "bbm_indonesia.api.app:create_app",
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
