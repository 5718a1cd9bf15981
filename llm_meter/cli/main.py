"""
CLI interface for llm-meter.

Maintenance commands for disk caches and configuration files.
"""

import sys
from datetime import datetime
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from llm_meter.cache.disk import DiskCache
from llm_meter.config.loader import load_meter_config

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

CacheDirOption = typer.Option(
    None,
    "--dir",
    "-d",
    help="Cache directory (defaults to the system temp dir)"
)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """llm-meter CLI."""
    if ctx.invoked_subcommand is None:
        console.print("llm-meter - Use --help to see available commands")


@app.command("check-config")
def check_config(path: str = typer.Argument(..., help="Path to YAML meter config")):
    """Validate a meter configuration file."""
    try:
        config = load_meter_config(path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title="Meter configuration")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("cache.backend", config.cache.backend.value)
    table.add_row("cache.max_entries", _or_dash(config.cache.max_entries))
    table.add_row("cache.ttl_ms", _or_dash(config.cache.ttl_ms))
    table.add_row("cache.cache_dir", _or_dash(config.cache.cache_dir))
    if config.budget is not None:
        table.add_row("budget.max_cost_usd", _or_dash(config.budget.max_cost_usd))
        table.add_row("budget.max_tokens", _or_dash(config.budget.max_tokens))
    table.add_row("pricing.allow_unknown_models", str(config.pricing.allow_unknown_models))
    table.add_row("pricing.models", ", ".join(sorted(config.pricing.models)) or "-")
    console.print(table)
    console.print("[green]✓[/] Configuration is valid")
    sys.exit(EXIT_CODE_PASS)


@app.command("cache-info")
def cache_info(cache_dir: Optional[str] = CacheDirOption):
    """Show entry count and size of a disk cache."""
    cache = DiskCache(cache_dir=cache_dir)
    entries = cache.entries()

    table = Table(title=f"Disk cache {cache.cache_dir}")
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Oldest")
    table.add_column("Newest")
    if entries:
        mtimes = [entry.mtime for entry in entries]
        table.add_row(
            str(len(entries)),
            _format_bytes(sum(entry.size for entry in entries)),
            _format_mtime(min(mtimes)),
            _format_mtime(max(mtimes))
        )
    else:
        table.add_row("0", _format_bytes(0), "-", "-")
    console.print(table)


@app.command("cache-prune")
def cache_prune(
    cache_dir: Optional[str] = CacheDirOption,
    max_entries: Optional[int] = typer.Option(
        None,
        "--max-entries",
        "-n",
        help="Keep at most this many of the newest entries"
    ),
    ttl_ms: Optional[float] = typer.Option(
        None,
        "--ttl-ms",
        "-t",
        help="Delete entries older than this many milliseconds"
    )
):
    """Prune a disk cache by age and entry count (best-effort)."""
    if max_entries is None and ttl_ms is None:
        console.print("[red]Error:[/] pass --max-entries and/or --ttl-ms")
        sys.exit(EXIT_CODE_FAIL)
    try:
        cache = DiskCache(cache_dir=cache_dir, max_entries=max_entries, ttl_ms=ttl_ms)
    except ValueError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    deleted = cache.prune()
    console.print(f"[green]✓[/] Pruned {deleted} entries from {cache.cache_dir}")


@app.command("cache-clear")
def cache_clear(cache_dir: Optional[str] = CacheDirOption):
    """Delete every entry in a disk cache."""
    cache = DiskCache(cache_dir=cache_dir)
    deleted = cache.clear()
    console.print(f"[green]✓[/] Deleted {deleted} entries from {cache.cache_dir}")


def _or_dash(value) -> str:
    return "-" if value is None else str(value)


def _format_bytes(size: int) -> str:
    """Format a byte count with a binary unit."""
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:,.0f} {unit}" if unit == "B" else f"{size:,.1f} {unit}"
        size /= 1024
    return f"{size:,.1f} GiB"


def _format_mtime(mtime: float) -> str:
    return datetime.fromtimestamp(mtime).strftime("%Y-%m-%d %H:%M:%S")


if __name__ == "__main__":
    app()
