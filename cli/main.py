"""Artifact Scout CLI — entry-point for scraping runs.

Usage:
    python cli/main.py --help

Commands:
    run       → discover + extract, write dataset and feed JSON
    test      → small smoke run (one search round, three artifacts)
    classify  → classify a local source file
    check     → pre-flight check for browser and network
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from scout.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import Optional

import typer

from scout.classifier import classify
from scout.config import settings
from scout.dataset import load_existing, save_outputs
from scout.errors import RunStartupError
from scout.pipeline import RunReport, run_scrape
from scout.scraper.fetcher import check_runtime

app = typer.Typer(
    name="scout",
    help="Artifact Scout CLI.",
    no_args_is_help=True,
)


def _print_report(report: RunReport) -> None:
    typer.echo("")
    typer.echo(f"[run] Found    : {report.found}")
    if report.skipped_existing:
        typer.echo(f"[run] Skipped  : {report.skipped_existing} (already in dataset)")
    typer.echo(f"[run] Scraped  : {report.scraped}")
    typer.echo(f"[run] Failed   : {report.failed}")
    if report.cancelled:
        typer.echo("[run] Run was cancelled before all candidates were processed.")
    for url, reason in report.failures:
        typer.echo(f"  ✗ {url}  — {reason or 'unknown'}")


def _preflight(headless: bool) -> None:
    try:
        status = check_runtime(headless=headless)
    except RunStartupError as exc:
        typer.echo(f"[run] Cannot start: {exc}", err=True)
        raise typer.Exit(1)
    if not status["browser"]:
        typer.echo("[run] No browser available; rendered search and full-render extraction will fail.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@app.command("run")
def run(
    depth: int = typer.Option(settings.search_depth, help="Query rounds per discovery source."),
    update_only: bool = typer.Option(False, "--update-only", help="Skip artifacts already in the dataset."),
    headful: bool = typer.Option(False, "--headful", help="Show the browser window."),
    limit: Optional[int] = typer.Option(None, help="Process at most this many candidates."),
    screenshots: bool = typer.Option(settings.screenshots, "--screenshots/--no-screenshots", help="Capture screenshots during full renders."),
    output_dir: Path = typer.Option(settings.output_dir, help="Directory for dataset, feed and screenshots."),
) -> None:
    """Discover artifacts, extract them and write the dataset and feed files."""
    settings.output_dir = output_dir
    settings.ensure_output_dir()
    headless = not headful
    _preflight(headless)

    existing, existing_urls = load_existing(settings.dataset_path)
    typer.echo(f"[run] Loaded {len(existing)} existing artifact(s) from {settings.dataset_path}")

    report = run_scrape(
        depth,
        update_only=update_only,
        existing_urls=existing_urls,
        limit=limit,
        headless=headless,
        screenshots=screenshots,
    )
    _print_report(report)

    if update_only and not report.records:
        typer.echo("[run] No new artifacts. Dataset is up to date.")
        return

    artifacts = [*existing, *report.records] if update_only else report.records
    dataset = save_outputs(artifacts, settings.dataset_path, settings.feed_path)
    typer.echo(f"[run] Total artifacts: {dataset['totalArtifacts']}")
    typer.echo(f"[run] Saved {settings.dataset_path} and {settings.feed_path}")


@app.command("test")
def test_run(
    max_artifacts: int = typer.Option(3, help="Number of artifacts to extract."),
    output: Path = typer.Option(Path("test_result.json"), help="Where to write the records."),
) -> None:
    """Smoke run: one search round, a handful of artifacts."""
    _preflight(settings.headless)
    report = run_scrape(1, limit=max_artifacts)
    output.write_text(
        json.dumps([r.to_dict() for r in report.records], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    _print_report(report)
    typer.echo(f"[test] Saved {len(report.records)} record(s) to {output}")


@app.command("classify")
def classify_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file to classify."),
) -> None:
    """Print the inferred content type and language of a local file."""
    result = classify(path.read_text(encoding="utf-8", errors="replace"))
    typer.echo(f"{result.content_type.value}\t{result.language or '-'}")


@app.command("check")
def check(
    headful: bool = typer.Option(False, "--headful", help="Launch a visible browser."),
) -> None:
    """Check that a browser and the network are available."""
    try:
        status = check_runtime(headless=not headful)
    except RunStartupError as exc:
        typer.echo(f"[check] {exc}", err=True)
        raise typer.Exit(1)
    for name, ok in status.items():
        typer.echo(f"[check] {name:<8}: {'ok' if ok else 'unavailable'}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
