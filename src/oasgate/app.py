"""Typer application and CLI entry point for oasgate.

The application has a single command: ``oasgate TARGET [LEVEL]``. It resolves
the effective configuration, builds the resolver, runs the batch
orchestrator over every document named by ``TARGET`` and prints one report
per document plus the summary.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`oasgate.config`: Configuration resolution.
    :mod:`oasgate.output`: Output formatting initialised in :func:`check`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oasgate import __version__
from oasgate.exceptions import OasGateError
from oasgate.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_VALIDATION_FAILED,
)
from oasgate.models import BatchCounters, ValidationReport

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="oasgate",
    help="Check Swagger 2.0 / OpenAPI 3.x definitions before importing them into an API gateway.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oasgate {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command()
def check(
    target: str = typer.Argument(
        ...,
        help="location:<file or directory>, '-' for stdin, or the document text itself.",
    ),
    level: Optional[int] = typer.Argument(
        None,
        min=0,
        max=2,
        help="Validation level: 0 parse only, 1 compatibility, 2 full (default from config).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_remote_refs: bool = typer.Option(
        False, "--no-remote-refs", help="Do not load URLs or external files referenced by $ref."
    ),
    exclude: Optional[list[str]] = typer.Option(
        None,
        "--exclude",
        "-e",
        help="gitignore-style pattern skipped while walking a directory (repeatable).",
    ),
) -> None:
    """Validate every document named by TARGET and print a report per document.

    Exits with code 1 when at least one document failed.
    """
    from oasgate.cache import RemoteReferenceCache
    from oasgate.config import get_cache_dir, resolve_config
    from oasgate.output import OutputFormat, OutputManager, error, set_output
    from oasgate.parser import RemoteLoader, SpecResolver
    from oasgate.validation import BatchOrchestrator, iter_sources

    _configure_logging(verbose)

    fmt: Optional[str] = None
    if json_output:
        fmt = OutputFormat.JSON.value
    elif plain_output:
        fmt = OutputFormat.PLAIN.value

    try:
        config = resolve_config(
            cli_level=level,
            cli_format=fmt,
            cli_remote_refs=False if no_remote_refs else None,
            cli_exclude=exclude,
        )
    except OasGateError as exc:
        set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = OutputManager(
        format=OutputFormat(config.output.format),
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    output.debug(
        f"Validation level {config.validation_level}, "
        f"remote references {'enabled' if config.remote_refs.enabled else 'disabled'}"
    )

    cache: Optional[RemoteReferenceCache] = None
    if config.cache.enabled:
        cache = RemoteReferenceCache(get_cache_dir(), config.cache)
    loader = RemoteLoader(
        enabled=config.remote_refs.enabled,
        timeout=config.remote_refs.timeout,
        cache=cache,
    )
    orchestrator = BatchOrchestrator(SpecResolver(loader), config.validation_level)

    reports: list[ValidationReport] = []
    counters = BatchCounters()
    try:
        for source in iter_sources(target, config.exclude):
            output.progress(f"Validating {source.name}")
            report, counters = orchestrator.process(source, counters)
            if output.format == OutputFormat.JSON:
                reports.append(report)
            else:
                output.print_report(report)
    finally:
        if cache is not None:
            cache.close()

    if output.format == OutputFormat.JSON:
        output.print_batch(reports, counters)
    else:
        output.print_summary(counters)

    if counters.has_failures:
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from oasgate.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oasgate`` console script.

    Unhandled :class:`~oasgate.exceptions.OasGateError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oasgate.output import error

        if isinstance(exc, OasGateError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            logger.debug("Crash log written to %s", log_path)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
