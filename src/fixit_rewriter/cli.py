"""CLI commands for applying fix-it hints from a diagnostics document."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from .config import DEFAULT_CONFIG_NAME, ConfigError, RewriterSettings, load_config, resolve_settings
from .diagnostics import DiagnosticsDocument, DiagnosticsFormatError, load_diagnostics
from .errors import FixItError, FixItStatus
from .rewriter import BundleOutcome, FixItRewriter, LoggingConsumer
from .tools.output import STDOUT_MARKER

APP_HELP = "Apply fix-it hints attached to diagnostics to a source file."

app = typer.Typer(help=APP_HELP)


def _configure_logging(level: int) -> None:
    """Route log records to stderr so stdout stays free for fixed output."""
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)


def _load_settings(config_path: Path | None, *, verbose: bool) -> RewriterSettings:
    path = config_path if config_path is not None else Path(DEFAULT_CONFIG_NAME)
    if config_path is not None and not config_path.exists():
        raise typer.BadParameter(f"Config file not found: {config_path}")
    try:
        settings = resolve_settings(load_config(path))
    except ConfigError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(code=1) from error
    _configure_logging(logging.DEBUG if verbose else settings.log_level)
    return settings


def _load_document(diagnostics_path: Path) -> DiagnosticsDocument:
    try:
        return load_diagnostics(diagnostics_path)
    except DiagnosticsFormatError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(code=1) from error


def _open_session(source: Optional[str], document: DiagnosticsDocument, settings: RewriterSettings) -> FixItRewriter:
    """Create the rewriting session for ``source`` (falling back to the document's)."""
    source_name = source or document.source
    if not source_name:
        raise typer.BadParameter("No source file given and the diagnostics document names none.")

    consumer = LoggingConsumer()
    if source_name == STDOUT_MARKER:
        text = typer.get_text_stream("stdin").read()
        return FixItRewriter(
            text,
            input_name=STDOUT_MARKER,
            consumer=consumer,
            marker=settings.marker,
            encoding=settings.encoding,
        )
    try:
        return FixItRewriter.from_file(
            source_name,
            consumer=consumer,
            marker=settings.marker,
            encoding=settings.encoding,
        )
    except (OSError, UnicodeDecodeError) as error:
        typer.echo(f"Unable to read source file {source_name}: {error}", err=True)
        raise typer.Exit(code=1) from error


def _render_outcome(outcome: BundleOutcome) -> str:
    label = f"#{outcome.index} [{outcome.severity.value.lower()}] {outcome.status.value}"
    if outcome.validation.reason:
        label += f" :: {outcome.validation.reason}"
    if outcome.application and outcome.application.failed:
        reasons = "; ".join(reason for _, _, reason in outcome.application.failures)
        label += f" :: {reasons}"
    if outcome.counted_failure:
        label += " (counted)"
    return label


@app.command()
def apply(
    source: Optional[str] = typer.Argument(
        None,
        help="Source file to fix, or '-' for stdin/stdout. Defaults to the document's 'source'.",
    ),
    diagnostics: Path = typer.Option(
        ...,
        "--diagnostics",
        "-d",
        help="YAML or JSON document listing diagnostics and their fix-its.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Explicit destination for the fixed file, or '-' for stdout.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to the rewriter configuration file (default: ./{DEFAULT_CONFIG_NAME} when present).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Apply every admissible fix-it and write the fixed file."""
    settings = _load_settings(config, verbose=verbose)
    document = _load_document(diagnostics)
    rewriter = _open_session(source, document, settings)
    rewriter.handle_diagnostics(document.to_diagnostics())

    try:
        result = rewriter.write_fixed_file(output)
    except FixItError as error:
        typer.echo(f"Failed to write fixed file: {error}", err=True)
        raise typer.Exit(code=1) from error

    typer.echo(result.message, err=True)
    if result.status == FixItStatus.OUTPUT_SUPPRESSED:
        raise typer.Exit(code=1)


@app.command()
def check(
    source: Optional[str] = typer.Argument(
        None,
        help="Source file the fix-its refer to. Defaults to the document's 'source'.",
    ),
    diagnostics: Path = typer.Option(
        ...,
        "--diagnostics",
        "-d",
        help="YAML or JSON document listing diagnostics and their fix-its.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to the rewriter configuration file (default: ./{DEFAULT_CONFIG_NAME} when present).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit outcomes as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Report what would happen to each diagnostic's fix-its without writing."""
    settings = _load_settings(config, verbose=verbose)
    document = _load_document(diagnostics)
    rewriter = _open_session(source, document, settings)
    outcomes: List[BundleOutcome] = rewriter.handle_diagnostics(document.to_diagnostics())

    if as_json:
        payload = {
            "failures": rewriter.num_failures,
            "outcomes": [outcome.to_dict() for outcome in outcomes],
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        for outcome in outcomes:
            typer.echo(_render_outcome(outcome))
        typer.echo(f"Fix-it failures: {rewriter.num_failures}")

    if rewriter.num_failures:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
