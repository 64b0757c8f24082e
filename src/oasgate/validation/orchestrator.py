"""Batch orchestration: sources in, reports and counters out.

Each document goes through ``CLASSIFY -> VALIDATE_PRIMARY ->
(VALIDATE_FALLBACK)? -> REPORT``:

1. :func:`~oasgate.validation.classifier.classify_document` decides the
   family. An unparsable document, an unrecognised family or a missing title
   is reported as ``INVALID`` straight away.
2. The validator for the detected family runs. When it raises
   :class:`~oasgate.exceptions.WrongFamilyError` the other family's validator
   is tried once.
3. The report is recorded in a fresh :class:`~oasgate.models.BatchCounters`
   value threaded through the run.

One document's failure never stops the batch: unreadable files become
``IO_FAILURE`` reports and the walk continues.

Example::

    orchestrator = BatchOrchestrator(SpecResolver(), level=2)
    counters = BatchCounters()
    for source in iter_sources("location:./definitions"):
        report, counters = orchestrator.process(source, counters)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

import pathspec

from oasgate.exceptions import WrongFamilyError
from oasgate.models import (
    BatchCounters,
    Diagnostic,
    DiagnosticCode,
    Family,
    Severity,
    SpecDocument,
    ValidationReport,
    Verdict,
)
from oasgate.parser.loader import read_source, read_stdin
from oasgate.parser.oas import Resolver
from oasgate.validation.classifier import classify_document
from oasgate.validation.diagnostics import DiagnosticClassifier
from oasgate.validation.policy import policy_for
from oasgate.validation.validators import FamilyValidator, validator_for

logger = logging.getLogger(__name__)

LOCATION_PREFIX = "location:"
STDIN_TARGET = "-"
IGNORE_FILE = ".oasgateignore"
INLINE_NAME = "<inline>"
STDIN_NAME = "<stdin>"


@dataclass(frozen=True)
class DocumentSource:
    """One document to validate.

    Attributes:
        name: Label used in reports (file path, ``<inline>`` or ``<stdin>``).
        location: File path the text is read from, ``None`` for inline text
            and stdin.
        text: Inline document text; ``None`` when the text must be read.
    """

    name: str
    location: Optional[str] = None
    text: Optional[str] = None

    def read(self) -> str:
        """Return the document text.

        Raises:
            OSError: If the file cannot be read.
        """
        if self.text is not None:
            return self.text
        if self.location is None:
            return read_stdin()
        return read_source(self.location)


# ------------------------------------------------------------------ #
# Sources
# ------------------------------------------------------------------ #


def iter_sources(target: str, exclude: Iterable[str] = ()) -> Iterator[DocumentSource]:
    """Lazily yield the documents named by a CLI *target*.

    * ``location:<path>`` -- a file yields itself; a directory is walked
      depth-first with entries sorted by name. A missing path still yields
      one source, whose read fails and is reported as ``IO_FAILURE``.
    * ``-`` -- one document read from stdin.
    * anything else -- the target is the document text itself.

    Args:
        target: The CLI target.
        exclude: gitignore-style patterns, relative to the walked directory,
            of files and directories to skip. Patterns from a
            ``.oasgateignore`` file in the walked directory are added.
    """
    if target == STDIN_TARGET:
        yield DocumentSource(name=STDIN_NAME)
        return
    if not target.startswith(LOCATION_PREFIX):
        yield DocumentSource(name=INLINE_NAME, text=target)
        return

    path = Path(target[len(LOCATION_PREFIX):]).expanduser()
    if not path.is_dir():
        yield DocumentSource(name=str(path), location=str(path))
        return

    spec = _exclusion_spec(path, list(exclude))
    yield from _walk(path, path, spec, {path.resolve()})


def _exclusion_spec(root: Path, patterns: list[str]) -> pathspec.PathSpec:
    ignore_file = root / IGNORE_FILE
    if ignore_file.is_file():
        patterns.extend(
            ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
        )
    return pathspec.PathSpec.from_lines("gitignore", patterns)


def _walk(
    directory: Path, root: Path, spec: pathspec.PathSpec, visited: set[Path]
) -> Iterator[DocumentSource]:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.name.startswith("."):
            continue
        relative = entry.relative_to(root).as_posix()
        if entry.is_dir():
            if spec.match_file(relative + "/"):
                logger.debug("Skipping excluded directory %s", entry)
                continue
            real = entry.resolve()
            if real in visited:
                logger.debug("Skipping already walked directory %s", entry)
                continue
            visited.add(real)
            yield from _walk(entry, root, spec, visited)
        elif entry.is_file():
            if spec.match_file(relative):
                logger.debug("Skipping excluded file %s", entry)
                continue
            yield DocumentSource(name=str(entry), location=str(entry))


# ------------------------------------------------------------------ #
# Orchestration
# ------------------------------------------------------------------ #


class BatchOrchestrator:
    """Validate documents at one level with one resolver.

    Args:
        resolver: The OAS-resolution capability shared by both validators.
        level: Validation level (0, 1 or 2).
        classifier: Diagnostic classifier; defaults to the standard rule table.

    Raises:
        ValueError: If *level* is not 0, 1 or 2.
    """

    def __init__(
        self,
        resolver: Resolver,
        level: int = 2,
        classifier: Optional[DiagnosticClassifier] = None,
    ) -> None:
        policy_for(level)
        self.resolver = resolver
        self.level = level
        self.classifier = classifier if classifier is not None else DiagnosticClassifier()
        self._validators: dict[Family, FamilyValidator] = {}

    def validate_text(
        self, text: str, location: Optional[str] = None, name: Optional[str] = None
    ) -> ValidationReport:
        """Classify and validate one document text."""
        source = name or location or INLINE_NAME
        document, blocking = classify_document(text, location)
        if blocking:
            return ValidationReport(
                source=source,
                title=document.title,
                family=document.family,
                level=self.level,
                diagnostics=tuple(blocking),
                verdict=Verdict.INVALID,
            )
        report = self._validate_family(document)
        return report.model_copy(update={"source": source})

    def process(
        self, source: DocumentSource, counters: BatchCounters
    ) -> tuple[ValidationReport, BatchCounters]:
        """Validate one source and return its report with the updated counters."""
        logger.debug("Processing %s", source.name)
        try:
            text = source.read()
        except OSError as exc:
            report = ValidationReport(
                source=source.name,
                level=self.level,
                diagnostics=(
                    Diagnostic(
                        code=DiagnosticCode.IO_FAILURE,
                        severity=Severity.ERROR,
                        message=f"unable to read {source.name}: {exc}",
                    ),
                ),
                verdict=Verdict.INVALID,
            )
        else:
            report = self.validate_text(text, source.location, source.name)
        return report, counters.record(report)

    def run(
        self, sources: Iterable[DocumentSource]
    ) -> Iterator[tuple[ValidationReport, BatchCounters]]:
        """Process *sources* in order with fresh counters.

        Yields each report together with the counters after recording it.
        """
        counters = BatchCounters()
        for source in sources:
            report, counters = self.process(source, counters)
            yield report, counters

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _validator(self, family: Family) -> FamilyValidator:
        if family not in self._validators:
            self._validators[family] = validator_for(family, self.resolver, self.classifier)
        return self._validators[family]

    def _validate_family(self, document: SpecDocument) -> ValidationReport:
        try:
            return self._validator(document.family).validate(document, self.level)
        except WrongFamilyError as primary:
            fallback_family = document.family.other
            logger.debug(
                "%s rejected as %s, retrying as %s",
                document.location or INLINE_NAME,
                document.family.label,
                fallback_family.label,
            )
            try:
                report = self._validator(fallback_family).validate(document, self.level)
            except WrongFamilyError as fallback:
                return ValidationReport(
                    title=document.title,
                    family=document.family,
                    level=self.level,
                    diagnostics=(
                        _with_severity(primary.diagnostic, Severity.ERROR),
                        _with_severity(fallback.diagnostic, Severity.ERROR),
                    ),
                    verdict=Verdict.INVALID,
                )
            note = _with_severity(primary.diagnostic, Severity.INFO)
            return report.model_copy(update={"diagnostics": (note,) + report.diagnostics})


def _with_severity(diagnostic: Diagnostic, severity: Severity) -> Diagnostic:
    return diagnostic.model_copy(update={"severity": severity})


def validate_document(
    text: str,
    level: int,
    resolver: Resolver,
    location: Optional[str] = None,
) -> ValidationReport:
    """Validate a single document text at *level*."""
    return BatchOrchestrator(resolver, level).validate_text(text, location)


def process_source(
    source: DocumentSource,
    level: int,
    resolver: Resolver,
    counters: BatchCounters,
) -> tuple[ValidationReport, BatchCounters]:
    """Validate one source and return its report with the updated counters."""
    return BatchOrchestrator(resolver, level).process(source, counters)


def run_batch(
    target: str,
    level: int,
    resolver: Resolver,
    exclude: Iterable[str] = (),
) -> Iterator[tuple[ValidationReport, BatchCounters]]:
    """Validate every document named by *target*, yielding running results."""
    orchestrator = BatchOrchestrator(resolver, level)
    return orchestrator.run(iter_sources(target, exclude))
