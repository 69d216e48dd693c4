"""CLI entry point — scan tool installations, report orphans and disk usage."""

import asyncio
import json
from pathlib import Path

import click
import typer

from .config import ScanConfig, load_config
from .errors import ScanError
from .format import (
    format_caches,
    format_disk_usage,
    format_dotfiles,
    format_orphans,
    format_summary,
    format_tools,
)
from .logconfig import setup_logging
from .models import ToolSource
from .rules.registry import RULE_INFO
from .scan import scan_all, scan_inventory, scan_orphans, summarize
from .scanner import get_dir_details, scan_caches, scan_disk_usage, scan_dotfiles
from .sizer import size_of


def _err(msg: str) -> None:
    """Raise a styled error (red box) — used for all CLI errors."""
    raise click.BadParameter(msg)


app = typer.Typer(help="Inventory developer tools and flag what is safe to remove.")


def _config(ctx: typer.Context) -> ScanConfig:
    return ctx.obj if isinstance(ctx.obj, ScanConfig) else ScanConfig()


def _echo_json(rows) -> None:
    typer.echo(json.dumps(rows, indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config YAML (default: ~/.toolsweep/config.yaml)"),
) -> None:
    """Scan package managers and home-directory tool folders (read-only)."""
    setup_logging("DEBUG" if verbose else None, "json" if log_json else None)
    try:
        ctx.obj = load_config(config_path)
    except ScanError as e:
        _err(str(e))


@app.command("tools")
def tools_cmd(
    ctx: typer.Context,
    source: ToolSource = typer.Option(None, "--source", "-s", help="Only this source (npm, cargo, pip, go)"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List installed tools, one row per package and source."""
    config = _config(ctx)
    try:
        if source is not None:
            records = asyncio.run(scan_inventory(source, config))
        else:
            records = asyncio.run(scan_all(config))
    except ScanError as e:
        _err(str(e))
    if json_out:
        _echo_json([r.to_dict() for r in records])
        return
    typer.echo(format_tools(records))


@app.command("orphans")
def orphans_cmd(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    explain: str = typer.Option(None, "--explain", "-e", help="Explain a rule by ID and exit"),
) -> None:
    """Report packages that nothing seems to need. Nothing is removed."""
    if explain:
        _print_explain(explain)
        return
    candidates = asyncio.run(scan_orphans(_config(ctx)))
    if json_out:
        _echo_json([c.to_dict() for c in candidates])
        return
    typer.echo(format_orphans(candidates))


def _print_explain(rule_id: str) -> None:
    """Print rule description and exit."""
    if rule_id in ("list", "rules"):
        typer.echo("Available rules:")
        for rid in RULE_INFO:
            typer.echo(f"  {rid}")
        typer.echo("\nUse: toolsweep orphans --explain <rule_id>")
        return
    info = RULE_INFO.get(rule_id)
    if not info:
        _err(f"Unknown rule: {rule_id}\nAvailable: {', '.join(RULE_INFO.keys())}")
    typer.echo(f"Rule: {rule_id}")
    typer.echo(f"Source: {info['source']}")
    typer.echo(f"Description: {info['description']}")
    typer.echo(f"When: {info['when']}")
    typer.echo(f"Fix: {info['fix']}")


@app.command("caches")
def caches_cmd(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Size package-manager caches."""
    try:
        entries = asyncio.run(scan_caches(_config(ctx)))
    except ScanError as e:
        _err(str(e))
    if json_out:
        _echo_json([e.to_dict() for e in entries])
        return
    typer.echo(format_caches(entries))


@app.command("disk")
def disk_cmd(
    ctx: typer.Context,
    path: Path = typer.Argument(None, help="Break down this directory instead"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Disk usage of tool directories, largest first."""
    try:
        if path is not None:
            entries = get_dir_details(path)
            title = str(path)
        else:
            entries = asyncio.run(scan_disk_usage(_config(ctx)))
            title = "disk usage"
    except (OSError, ScanError) as e:
        _err(str(e))
    if json_out:
        _echo_json([e.to_dict() for e in entries])
        return
    typer.echo(format_disk_usage(entries, title=title))


@app.command("dotfiles")
def dotfiles_cmd(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Dot-directories in your home folder with their sizes."""
    try:
        folders = asyncio.run(scan_dotfiles(_config(ctx)))
    except ScanError as e:
        _err(str(e))
    if json_out:
        _echo_json([f.to_dict() for f in folders])
        return
    typer.echo(format_dotfiles(folders))


@app.command("size")
def size_cmd(
    path: Path = typer.Argument(..., help="File or directory"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Total size and file count under a path (missing path -> 0)."""
    size, count = size_of(path)
    if json_out:
        _echo_json({"path": str(path), "size_bytes": size, "item_count": count})
        return
    typer.echo(f"{size}\t{count}\t{path}")


@app.command("summary")
def summary_cmd(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Tool counts per source and total measured size."""
    try:
        summary = summarize(asyncio.run(scan_all(_config(ctx))))
    except ScanError as e:
        _err(str(e))
    if json_out:
        _echo_json(summary.to_dict())
        return
    typer.echo(format_summary(summary))


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
