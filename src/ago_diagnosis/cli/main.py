"""CLI commands for the AGO diagnosis tool."""

import json
import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

import click
import structlog

from ago_diagnosis import __version__
from ago_diagnosis.api.app import create_app
from ago_diagnosis.diagnosis.service import DiagnosisService
from ago_diagnosis.evaluation.errors import DiagnosisCancelledError
from ago_diagnosis.evaluation.evaluator import is_usable_selector
from ago_diagnosis.evaluation.models import Report
from ago_diagnosis.observability.logging import configure_logging
from ago_diagnosis.rubric.errors import RubricLoadError
from ago_diagnosis.rubric.loader import FileRubricSource
from ago_diagnosis.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

# Seconds between checks for Ctrl-C while a diagnosis runs
_WAIT_SLICE_SECONDS = 0.2


def _setup_logging(settings: AppSettings, verbose: bool) -> None:
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_format == "json",
    )


def _run_cancellable(service: DiagnosisService, url: str) -> Report:
    """Run a diagnosis off the main thread so Ctrl-C can cancel it."""
    cancel_event = threading.Event()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="diagnose") as pool:
        future: Future[Report] = pool.submit(service.diagnose, url, cancel_event)
        while True:
            try:
                return future.result(timeout=_WAIT_SLICE_SECONDS)
            except TimeoutError:
                continue
            except KeyboardInterrupt:
                cancel_event.set()
                click.echo("Cancelling diagnosis...", err=True)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """AI search optimisation (AGO) diagnosis CLI."""


@cli.command()
@click.argument("url")
@click.option(
    "--rubric",
    "rubric_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="CSV or YAML rubric file (default: RUBRIC_PATH or built-in rubric).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1, max=64),
    help="Concurrent item evaluations (default: DIAGNOSIS_MAX_WORKERS).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def diagnose(
    url: str,
    rubric_path: Path | None,
    workers: int | None,
    verbose: bool,
) -> None:
    """Diagnose URL and print the report as JSON.

    Exits with status 1 when the page cannot be retrieved, 130 when
    cancelled with Ctrl-C.
    """
    overrides: dict[str, object] = {}
    if rubric_path is not None:
        overrides["rubric_path"] = rubric_path
    if workers is not None:
        overrides["max_workers"] = workers
    settings = get_settings().model_copy(update=overrides)
    _setup_logging(settings, verbose)

    try:
        service = DiagnosisService.from_settings(settings)
        report = _run_cancellable(service, url)
    except RubricLoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except DiagnosisCancelledError:
        click.echo("Diagnosis cancelled.", err=True)
        sys.exit(130)

    click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    if report.failed:
        sys.exit(1)


@cli.command()
@click.option("--host", type=str, help="Bind address (default: HOST or 0.0.0.0).")
@click.option(
    "--port", type=click.IntRange(1, 65535), help="Port (default: PORT or 3000)."
)
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
def serve(host: str | None, port: int | None, debug: bool) -> None:
    """Run the HTTP API."""
    overrides: dict[str, object] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    settings = get_settings().model_copy(update=overrides)
    _setup_logging(settings, debug)

    app = create_app(settings)
    logger.info(
        "server_starting", component="cli", host=settings.host, port=settings.port
    )
    app.run(host=settings.host, port=settings.port, debug=debug, threaded=True)


@cli.command("validate-rubric")
@click.argument(
    "rubric_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
def validate_rubric(rubric_path: Path) -> None:
    """Load a rubric file and report unusable rows."""
    configure_logging(json_format=False, level="WARNING")
    source = FileRubricSource(rubric_path)

    try:
        items = source.load()
    except RubricLoadError as exc:
        click.echo("Rubric validation failed:", err=True)
        click.echo(f"  - {exc}", err=True)
        sys.exit(1)

    unusable = [item for item in items if not is_usable_selector(item.selector)]
    unsupported = [item for item in items if item.method is None]

    click.echo("Rubric is valid!")
    click.echo(f"  Items: {len(items)}")
    click.echo(f"  Checksum: {source.checksum}")
    for item in unusable:
        click.echo(f"  - {item.id}: selector is empty or invalid (scores 0)")
    for item in unsupported:
        click.echo(
            f"  - {item.id}: method '{item.method_code}' is not supported "
            "(reported as unevaluated)"
        )
