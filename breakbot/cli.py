"""CLI entry point for Breakbot."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from breakbot.errors import BreakbotError
from breakbot.models.config import BreakbotConfig
from breakbot.orchestrator import Orchestrator
from breakbot.reporter.text_report import (
    breakpoints_reference,
    build_error_report,
    build_text_report,
)
from breakbot.simulator import ios_simulator
from breakbot.url_utils import is_valid_target_url
from breakbot.viewports import ad_hoc_viewport, classify_breakpoint

console = Console()

DEFAULT_CONFIG = "breakbot.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _print_markdown(text: str) -> None:
    # Reports contain utility classes like min-w-[44px]; keep rich markup off
    console.print(text, markup=False, highlight=False)


def _validate_url(ctx, param, value):
    values = value if isinstance(value, tuple) else (value,)
    for url in values:
        if not is_valid_target_url(url):
            raise click.BadParameter(f"'{url}' is not an absolute http(s) URL")
    return value


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Breakbot: responsive layout testing across viewport sizes"""
    setup_logging(verbose)


@cli.command("test")
@click.argument("urls", nargs=-1, required=True, callback=_validate_url)
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--no-save", is_flag=True, help="Print the report without writing report files")
def responsive_test(urls: tuple[str, ...], config: str, no_save: bool) -> None:
    """Test one or more URLs for responsive layout issues."""
    cfg = BreakbotConfig.load_or_default(config)
    orchestrator = Orchestrator(cfg)
    try:
        outcomes = orchestrator.test_urls(list(urls), write_reports=not no_save)
    except BreakbotError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except asyncio.CancelledError:
        console.print("[yellow]Interrupted[/yellow]")
        sys.exit(130)

    for outcome in outcomes:
        if outcome.ok:
            _print_markdown(build_text_report(outcome.result, outcome.groups, cfg.max_examples_per_kind))
            for fmt, path in outcome.reports.items():
                console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")
        else:
            _print_markdown(build_error_report(outcome.url, outcome.error))

    if not all(o.ok for o in outcomes):
        sys.exit(1)


@cli.command()
@click.argument("url", callback=_validate_url)
@click.option("--width", "-w", required=True, type=click.IntRange(320, 2560), help="Viewport width in pixels")
@click.option("--output", "-o", default=None, help="PNG output path")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def screenshot(url: str, width: int, output: str | None, config: str) -> None:
    """Take a full-page screenshot of a URL at one viewport width."""
    cfg = BreakbotConfig.load_or_default(config)
    viewport = ad_hoc_viewport(width)
    orchestrator = Orchestrator(cfg)
    try:
        shot = orchestrator.capture(url, [viewport])[0]
    except BreakbotError as e:
        _print_markdown(f"## Error\n\n{e}\n")
        sys.exit(1)
    except asyncio.CancelledError:
        console.print("[yellow]Interrupted[/yellow]")
        sys.exit(130)

    path = Path(output) if output else Path(cfg.screenshot_dir) / f"screenshot_{width}px.png"
    shot.save(path)
    _print_markdown(
        f"## Screenshot: {url}\n\n**Width:** {width}px | **Breakpoint:** {classify_breakpoint(width)}\n"
    )
    console.print(f"  Saved: [blue]{path}[/blue]")


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def breakpoints(config: str) -> None:
    """List Tailwind breakpoints and the viewports Breakbot tests."""
    cfg = BreakbotConfig.load_or_default(config)
    _print_markdown(breakpoints_reference(cfg.viewports))


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def init(force: bool, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists() and not force:
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    BreakbotConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print("  [blue]breakbot test https://example.com[/blue]")


@cli.group()
def ios() -> None:
    """Test on the iOS Simulator (macOS with Xcode only)."""
    pass


def _require_simulator() -> None:
    if not asyncio.run(ios_simulator.is_available()):
        console.print("[red]iOS Simulator not available.[/red] Requires macOS with Xcode installed.")
        console.print("Use [blue]breakbot test[/blue] for cross-platform testing.")
        sys.exit(1)


@ios.command("list")
def ios_list() -> None:
    """List available iOS simulators."""
    _require_simulator()
    devices = asyncio.run(ios_simulator.list_simulators())
    if not devices:
        console.print("[yellow]No iPhone or iPad simulators found[/yellow]")
        return

    table = Table(title="iOS Simulators")
    table.add_column("Device", style="bold")
    table.add_column("Runtime")
    table.add_column("State")
    table.add_column("UDID")
    for d in devices[:20]:
        state = f"[green]{d.state}[/green]" if d.is_booted else d.state
        table.add_row(d.name, d.runtime, state, d.udid)
    console.print(table)
    if len(devices) > 20:
        console.print(f"...and {len(devices) - 20} more devices")


@ios.command("boot")
@click.argument("udid")
def ios_boot(udid: str) -> None:
    """Boot a simulator by UDID."""
    _require_simulator()
    devices = asyncio.run(ios_simulator.list_simulators())
    device = next((d for d in devices if d.udid == udid), None)
    if device is None:
        console.print(f"[red]No simulator found with UDID: {udid}[/red]")
        sys.exit(1)
    if device.is_booted:
        console.print(f"[green]{device.name} is already booted.[/green]")
        return

    if asyncio.run(ios_simulator.boot_simulator(udid)):
        console.print(f"[green]{device.name} is now running.[/green]")
        console.print("Use [blue]breakbot ios test URL[/blue] to test a URL on this device.")
    else:
        console.print(f"[red]Failed to boot {device.name}.[/red] Try opening Simulator.app manually.")
        sys.exit(1)


@ios.command("test")
@click.argument("url", callback=_validate_url)
@click.option("--udid", default=None, help="Simulator UDID (defaults to a booted or bootable iPhone)")
@click.option("--output", "-o", default=None, help="PNG output path")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def ios_test(url: str, udid: str | None, output: str | None, config: str) -> None:
    """Open a URL in Safari on the simulator and screenshot it."""
    _require_simulator()
    result = asyncio.run(ios_simulator.run_on_simulator(url, udid))
    if not result.success:
        console.print(f"[red]iOS Simulator Error:[/red] {result.error}")
        console.print("Try opening Simulator.app first, or run [blue]breakbot ios list[/blue].")
        sys.exit(1)

    console.print(f"[bold]iOS Simulator Test:[/bold] {url}")
    console.print(f"  Device: {result.device.name}")
    console.print(f"  Runtime: {result.device.runtime}")
    if result.screen_size:
        console.print(f"  Screen Size: {result.screen_size.width}x{result.screen_size.height}px")
    if result.screenshot:
        cfg = BreakbotConfig.load_or_default(config)
        path = Path(output) if output else Path(cfg.screenshot_dir) / f"ios_{result.device.udid[:8]}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(result.screenshot)
        console.print(f"  Saved: [blue]{path}[/blue]")


if __name__ == "__main__":
    cli()
