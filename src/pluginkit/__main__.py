"""CLI entry point: list, inspect, install and remove plugins."""

from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from .core.config import load_config
from .core.log import setup_logging
from .core.utils import human_size, short_path
from .plugins import PluginError, PluginRecord, find_plugin, list_plugins

console = Console()


def _fail(message: str) -> None:
    console.print(f"error: {message}", style="bold")
    sys.exit(1)


# Errors a lifecycle or catalog operation may surface to the user
USER_ERRORS = (PluginError, OSError, zipfile.BadZipFile)


def _get_record(config, name: str) -> PluginRecord:
    try:
        record = find_plugin(config, name)
    except USER_ERRORS as e:
        _fail(str(e))
    if record is None:
        _fail(f"unknown plugin: {name}")
    return record


def _status(record: PluginRecord) -> str:
    installed, available = record.versions()
    if record.is_installed() and record.is_available():
        if installed != available:
            return "[yellow]installed[/yellow] [dim](catalog differs)[/dim]"
        return "[green]installed[/green]"
    if record.is_installed():
        return "[green]installed[/green] [dim](local only)[/dim]"
    return "[dim]available[/dim]"


# ── Commands ────────────────────────────────────────────────────────


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--plugin-dir", "-d", default=None, help="Install root for plugins")
@click.option("--catalog", "-c", default=None, help="Catalog URL or path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, plugin_dir: str | None, catalog: str | None):
    """Manage installed and catalogued plugins."""
    setup_logging(verbose)
    ctx.obj = load_config(plugin_dir=plugin_dir, catalog_url=catalog, verbose=verbose)


@cli.command("list")
@click.pass_obj
def list_cmd(config):
    """List installed and available plugins."""
    try:
        records = list_plugins(config)
    except USER_ERRORS as e:
        _fail(str(e))
    if not records:
        console.print("no plugins installed or available", style="dim")
        return
    for r in records:
        installed, available = r.versions()
        ver = installed or available or "-"
        desc = r.short_description() or ""
        console.print(
            f"  [bold]{escape(r.name())}[/bold]  v{escape(ver)}  {_status(r)}"
            f"  [dim]{escape(desc)}[/dim]"
        )


@cli.command()
@click.argument("name")
@click.pass_obj
def info(config, name: str):
    """Show everything known about a plugin."""
    record = _get_record(config, name)
    installed, available = record.versions()
    path = record.path()
    console.print(f"[bold]{escape(record.name())}[/bold]  {_status(record)}")
    console.print(f"  installed version  {escape(installed or '-')}")
    console.print(f"  catalog version    {escape(available or '-')}")
    console.print(f"  path               {escape(short_path(path)) if path else '-'}")
    console.print(f"  homepage           {escape(record.homepage() or '-')}")
    if record.description():
        console.print()
        console.print(escape(record.description()))


@cli.command()
@click.argument("name")
@click.pass_obj
def install(config, name: str):
    """Download and install a plugin from the catalog."""
    record = _get_record(config, name)
    try:
        with console.status(f"installing {escape(name)}..."):
            record.download()
    except USER_ERRORS as e:
        _fail(str(e))
    console.print(f"installed [bold]{escape(name)}[/bold] to {escape(short_path(record.path()))}")


@cli.command()
@click.argument("name")
@click.pass_obj
def remove(config, name: str):
    """Remove an installed plugin."""
    record = _get_record(config, name)
    try:
        record.remove()
    except USER_ERRORS as e:
        _fail(str(e))
    console.print(f"removed [bold]{escape(name)}[/bold]")


@cli.command()
@click.argument("name")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write icon here")
@click.pass_obj
def icon(config, name: str, output: str | None):
    """Fetch a plugin's icon."""
    record = _get_record(config, name)
    data = record.retrieve_icon()
    if data is None:
        console.print(f"no icon for [bold]{escape(name)}[/bold]", style="dim")
        return
    if output:
        Path(output).write_bytes(data)
        console.print(f"wrote {human_size(len(data))} to {escape(output)}")
    else:
        console.print(f"icon found ({human_size(len(data))})")


def main():
    cli()


if __name__ == "__main__":
    main()
