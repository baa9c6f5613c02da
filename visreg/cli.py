"""CLI entry point for the visual regression harness."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from visreg.imaging.comparator import compare_images
from visreg.imaging.normalizer import normalize_image
from visreg.models.checks import BrokenImageCheckConfig, CheckResult, ChecksConfig
from visreg.models.comparison import RunReport, classify
from visreg.models.config import EnvironmentConfig, FrameworkConfig
from visreg.orchestrator import Orchestrator

console = Console()

STATUS_STYLE = {"pass": "green", "fail": "red", "error": "yellow"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> FrameworkConfig:
    try:
        return FrameworkConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'visreg init' to create a default config.")
        sys.exit(1)


def _print_report(report: RunReport) -> None:
    table = Table(title=f"Visual Comparison: {report.device_name}")
    table.add_column("Page", style="bold")
    table.add_column("Similarity", justify="right")
    table.add_column("Status")
    for r in report.results:
        style = STATUS_STYLE.get(r.status, "white")
        table.add_row(r.page_path, r.similarity.label(), f"[{style}]{r.status.upper()}[/{style}]")
    console.print(table)
    console.print(
        f"  Total: {report.total_pages}  "
        f"[green]Passed: {report.passed}[/green]  "
        f"[red]Failed: {report.failed}[/red]  "
        f"[yellow]Errors: {report.errors}[/yellow]"
    )


def _print_checks(results: list[CheckResult]) -> None:
    table = Table(title="Functional Checks")
    table.add_column("Check", style="bold")
    table.add_column("Kind")
    table.add_column("Result")
    table.add_column("Details")
    for r in results:
        style = STATUS_STYLE.get(r.result, "white")
        message = r.message + (f" ({r.warnings} warnings)" if r.warnings else "")
        table.add_row(r.name, r.kind, f"[{style}]{r.result.upper()}[/{style}]", message)
    console.print(table)


def _summarize(results: dict) -> bool:
    """Print everything a run produced. Returns True when nothing failed or errored."""
    ok = True
    for report in results["reports"]:
        _print_report(report)
        ok = ok and report.failed == 0 and report.errors == 0
    if results["checks"]:
        _print_checks(results["checks"])
        ok = ok and all(r.result == "pass" for r in results["checks"])
    for name, paths in results["artifacts"].items():
        for fmt, path in paths.items():
            console.print(f"  {name} {fmt.upper()} report: [blue]{path}[/blue]")
    return ok


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Staging vs production visual regression and smoke tests"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
@click.option("--device", "-d", default=None, help="Only run this device profile")
def run(config: str, device: str | None) -> None:
    """Run the visual comparison and the functional checks."""
    cfg = _load_config(config)
    try:
        results = Orchestrator(cfg).run_full_pipeline(device)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    if not _summarize(results):
        sys.exit(1)


@cli.command()
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
@click.option("--device", "-d", default=None, help="Only run this device profile")
def compare(config: str, device: str | None) -> None:
    """Capture staging and prod, diff every page, and write reports."""
    cfg = _load_config(config)
    try:
        results = Orchestrator(cfg).run_visual_comparison(device)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    if not _summarize(results):
        sys.exit(1)


@cli.command()
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
def checks(config: str) -> None:
    """Run only the functional checks (images, forms, menus)."""
    cfg = _load_config(config)
    if not cfg.checks.total:
        console.print("[yellow]No functional checks configured[/yellow]")
        return
    results = Orchestrator(cfg).run_checks()
    if not _summarize(results):
        sys.exit(1)


@cli.command()
@click.argument("staging_image", type=click.Path(exists=True, dir_okay=False))
@click.argument("prod_image", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default="diff.png", help="Diff image path")
@click.option("--config", "-c", default=None, help="Config file for thresholds and frame size")
def diff(staging_image: str, prod_image: str, output: str, config: str | None) -> None:
    """Normalize and compare two local screenshots. The inputs are resized in place."""
    cfg = _load_config(config) if config else None
    width = cfg.canonical_width if cfg else 1280
    height = cfg.canonical_height if cfg else 800
    normalize_image(Path(staging_image), width, height)
    normalize_image(Path(prod_image), width, height)

    kwargs = {}
    if cfg:
        kwargs = {
            "threshold": cfg.pixel_threshold,
            "diff_color": cfg.diff_color,
            "diff_color_alt": cfg.diff_color_alt,
        }
    outcome = compare_images(Path(staging_image), Path(prod_image), Path(output), **kwargs)
    status = classify(outcome.similarity, cfg.pass_threshold if cfg else 95.0)
    style = STATUS_STYLE.get(status, "white")
    console.print(f"Similarity: {outcome.similarity.label()} [{style}]{status.upper()}[/{style}]")
    if outcome.diff_path:
        console.print(f"Diff image: [blue]{outcome.diff_path}[/blue]")
    if status != "pass":
        sys.exit(1)


@cli.command()
@click.option("--staging", "-s", prompt="Staging base URL", help="Staging base URL")
@click.option("--prod", "-p", prompt="Production base URL", help="Production base URL")
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
def init(staging: str, prod: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config} already exists. Overwrite?"):
            return

    cfg = FrameworkConfig(
        staging=EnvironmentConfig(base_url=staging),
        prod=EnvironmentConfig(base_url=prod),
        checks=ChecksConfig(broken_images=[BrokenImageCheckConfig(page_url="/")]),
    )
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd the pages to compare, then run:")
    console.print('  [blue]visreg pages add "/apply/"[/blue]')
    console.print("  [blue]visreg run[/blue]")


@cli.group()
def pages() -> None:
    """Manage the pages compared between staging and prod."""
    pass


@pages.command("add")
@click.argument("page_path")
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
def pages_add(page_path: str, config: str) -> None:
    """Add a page path to both environments."""
    cfg = _load_config(config)
    for env in (cfg.staging, cfg.prod):
        if page_path not in env.urls:
            env.urls.append(page_path)
    cfg.save(config)
    console.print(f"[green]Added page:[/green] {page_path}")


@pages.command("remove")
@click.argument("page_path")
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
def pages_remove(page_path: str, config: str) -> None:
    """Remove a page path from both environments."""
    cfg = _load_config(config)
    if page_path not in cfg.staging.urls and page_path not in cfg.prod.urls:
        console.print(f"[yellow]Page not configured: {page_path}[/yellow]")
        return
    for env in (cfg.staging, cfg.prod):
        if page_path in env.urls:
            env.urls.remove(page_path)
    cfg.save(config)
    console.print(f"[green]Removed page:[/green] {page_path}")


@pages.command("list")
@click.option("--config", "-c", default="visreg-config.json", help="Config file path")
def pages_list(config: str) -> None:
    """List the configured pages."""
    cfg = _load_config(config)
    if not cfg.staging.urls:
        console.print("[yellow]No pages configured[/yellow]")
        return
    for i, page_path in enumerate(cfg.staging.urls, 1):
        console.print(f"  {i}. {page_path}")


if __name__ == "__main__":
    cli()
