"""Output formatting system with strict stdout/stderr discipline.

* **stdout** -- the per-document report lines and the batch summary (or,
  in JSON mode, one ``{"reports": [...], "summary": {...}}`` document).
  This is what CI jobs capture and parse.
* **stderr** -- all diagnostics of the tool itself (progress, debug
  detail and errors). Never contaminates the report stream.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding format preferences,
   Rich consoles, and quiet/verbose flags. Created once in
   :func:`~oasgate.app.check` and installed via :func:`set_output`.
2. :func:`error`, which reports through the global ``OutputManager`` so
   the entry point can print failures without holding the manager.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from oasgate.models import BatchCounters, Severity, ValidationReport, Verdict
from oasgate.validation.policy import acceptance_line, verdict_line

_MARKER = "-" * 16

_SEVERITY_STYLES = {
    Severity.INFO: "cyan",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

_VERDICT_STYLES = {
    Verdict.VALID: "bold green",
    Verdict.VALID_WITH_WARNINGS: "bold yellow",
    Verdict.MALFORMED: "bold red",
    Verdict.INVALID: "bold red",
}


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise. Callers can force a specific
    format via the ``--json`` or ``--plain`` CLI flags.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress progress messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print *data* as indented JSON to stdout."""
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def print_report(self, report: ValidationReport) -> None:
        """Print the lines of one document report.

        Start marker with the document title, numbered diagnostics, the
        verdict line, the acceptance line when the document is accepted, and
        the completion marker. Nothing is printed in JSON mode; use
        :meth:`print_batch` there.
        """
        if self._format == OutputFormat.JSON:
            return
        name = report.title or report.source
        lines = report_lines(report)
        if self._format == OutputFormat.PLAIN:
            for line in lines:
                self.print_data(line)
            return

        self._stdout.print(f"[bold]{escape(lines[0])}[/bold]")
        if report.source != name:
            self._stdout.print(f"[dim]{escape(report.source)}[/dim]")
        for index, diagnostic in enumerate(report.diagnostics, start=1):
            style = _SEVERITY_STYLES[diagnostic.severity]
            self._stdout.print(
                f"{index}. [{style}]{diagnostic.severity.value.upper()}[/{style}] "
                f"[bold]{diagnostic.code.value}[/bold]: {escape(diagnostic.message)}"
            )
        style = _VERDICT_STYLES[report.verdict]
        self._stdout.print(f"[{style}]{escape(verdict_line(report))}[/{style}]")
        accepted = acceptance_line(report)
        if accepted is not None:
            self._stdout.print(f"[green]{escape(accepted)}[/green]")
        self._stdout.print(f"[bold]{escape(lines[-1])}[/bold]")

    def print_summary(self, counters: BatchCounters) -> None:
        """Print the batch summary line (a table in Rich mode)."""
        if self._format == OutputFormat.JSON:
            return
        if self._format == OutputFormat.PLAIN:
            self.print_data(summary_line(counters))
            return
        table = Table(title="Summary", show_header=True, header_style="bold cyan")
        table.add_column("Processed")
        table.add_column("Successful")
        table.add_column("Failed")
        table.add_column("Malformed")
        table.add_column("Partially passed")
        table.add_row(
            str(counters.total_files),
            str(counters.succeeded),
            str(counters.failed),
            str(counters.malformed),
            str(counters.partially_passed),
        )
        self._stdout.print(table)

    def print_batch(self, reports: list[ValidationReport], counters: BatchCounters) -> None:
        """Print the whole run as one JSON document."""
        self.print_json(
            {
                "reports": [report_to_dict(report) for report in reports],
                "summary": counters.model_dump(mode="json"),
            }
        )

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim][debug] {escape(message)}[/dim]")

    def progress(self, message: str) -> None:
        """Print a dimmed progress message to stderr.

        Only displayed when stdout is a TTY. Suppressed by ``--quiet``.
        """
        if not self._quiet and _is_tty():
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape(message)}[/dim]")


# ------------------------------------------------------------------ #
# Report rendering
# ------------------------------------------------------------------ #


def report_lines(report: ValidationReport) -> list[str]:
    """Plain-text lines for one report, in print order."""
    name = report.title or report.source
    label = report.family.label
    lines = [f'{_MARKER} Parsing Started {label} "{name}" {_MARKER}']
    if report.source != name:
        lines.append(f"Source: {report.source}")
    for index, diagnostic in enumerate(report.diagnostics, start=1):
        lines.append(
            f"{index}. {diagnostic.severity.value.upper()} "
            f"{diagnostic.code.value}: {diagnostic.message}"
        )
    lines.append(verdict_line(report))
    accepted = acceptance_line(report)
    if accepted is not None:
        lines.append(accepted)
    lines.append(f'{_MARKER} Parsing Complete {label} "{name}" {_MARKER}')
    return lines


def summary_line(counters: BatchCounters) -> str:
    return (
        f"Summary --- Total Files Processed: {counters.total_files}. "
        f"Total Successful Files Count: {counters.succeeded}. "
        f"Total Failed Files Count: {counters.failed}. "
        f"Total Malformed Files Count: {counters.malformed}. "
        f"Total Partially Passed Files Count: {counters.partially_passed}."
    )


def report_to_dict(report: ValidationReport) -> dict[str, Any]:
    """JSON-ready form of a report, including the derived verdict sentences."""
    data = report.model_dump(mode="json")
    data["accepted"] = report.accepted
    data["verdict_line"] = verdict_line(report)
    data["acceptance_line"] = acceptance_line(report)
    return data


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def error(message: str) -> None:
    get_output().error(message)

