"""Canonical Pydantic models shared across all oasgate modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`RemoteRefsConfig`, :class:`CacheConfig`
    and :class:`GlobalConfig`.

**Validation models** -- produced by the classifier, the family validators
and the orchestrator:
    :class:`Encoding`, :class:`Family`, :class:`Severity`,
    :class:`DiagnosticSource`, :class:`ErrorKind`, :class:`DiagnosticCode`,
    :class:`Verdict`, :class:`HTTPMethod`, :class:`SpecDocument`,
    :class:`Diagnostic`, :class:`PathEntry`, :class:`ValidationReport` and
    :class:`BatchCounters`.

Validation models are frozen: a document, a diagnostic and a report never
change after creation, and :class:`BatchCounters` is threaded through a batch
run as a value.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class RemoteRefsConfig(BaseModel):
    """How remote ``$ref`` values (URLs and external files) are loaded."""

    enabled: bool = Field(default=True, description="Fetch remote references")
    timeout: float = Field(
        default=30.0, description="HTTP timeout in seconds for remote references"
    )


class CacheConfig(BaseModel):
    """Remote reference cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=False, description="Cache fetched remote references")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/oasgate/config.json``.

    Loaded by :func:`~oasgate.config.load_global_config`. Fields here have
    the lowest precedence and can be overridden by project config,
    environment variables, or CLI flags. See
    :func:`~oasgate.config.resolve_config` for the full precedence chain.
    """

    validation_level: int = Field(default=2, ge=0, le=2)
    output: OutputConfig = Field(default_factory=OutputConfig)
    remote_refs: RemoteRefsConfig = Field(default_factory=RemoteRefsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    exclude: list[str] = Field(
        default_factory=list,
        description="gitignore-style patterns skipped while walking directories",
    )


# --- Validation enums ---


class Encoding(str, enum.Enum):
    """Serialisation of a document, decided from its first character."""

    JSON = "json"
    YAML = "yaml"


class Family(str, enum.Enum):
    """OAS document family, decided from the discriminator field."""

    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Name used in operator-facing lines."""
        return _FAMILY_LABELS[self]

    @property
    def other(self) -> "Family":
        """The family tried as fallback when the resolver rejects this one."""
        if self is Family.SWAGGER2:
            return Family.OPENAPI3
        if self is Family.OPENAPI3:
            return Family.SWAGGER2
        return Family.UNKNOWN


_FAMILY_LABELS = {
    Family.SWAGGER2: "Swagger",
    Family.OPENAPI3: "OpenAPI",
    Family.UNKNOWN: "OAS",
}


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticSource(str, enum.Enum):
    """Which part of the pipeline produced a diagnostic."""

    PARSER = "parser"
    SEMANTIC_CHECK = "semantic_check"
    REFERENCE_SCAN = "reference_scan"


class ErrorKind(str, enum.Enum):
    """Top-level error kinds; every :class:`DiagnosticCode` belongs to one."""

    DOCUMENT_UNPARSABLE = "document_unparsable"
    FAMILY_UNRECOGNIZED = "family_unrecognized"
    TITLE_MISSING = "title_missing"
    WRONG_FAMILY = "wrong_family"
    RESOLVER_DIAGNOSTIC = "resolver_diagnostic"
    SEMANTIC_VIOLATION = "semantic_violation"
    IO_FAILURE = "io_failure"


class DiagnosticCode(str, enum.Enum):
    """Closed taxonomy of diagnostic codes."""

    DOCUMENT_UNPARSABLE = "DOCUMENT_UNPARSABLE"
    FAMILY_UNRECOGNIZED = "FAMILY_UNRECOGNIZED"
    TITLE_MISSING = "TITLE_MISSING"
    SWAGGER_MISSING = "SWAGGER_MISSING"
    OPENAPI_MISSING = "OPENAPI_MISSING"
    MALFORMED = "MALFORMED"
    SCHEMA_REF = "SCHEMA_REF"
    SCHEMA_UNEXPECTED = "SCHEMA_UNEXPECTED"
    REMOTE_REF = "REMOTE_REF"
    GENERIC = "GENERIC"
    EMPTY_PATHS = "EMPTY_PATHS"
    EMPTY_OPERATIONS = "EMPTY_OPERATIONS"
    NULL_OPERATION = "NULL_OPERATION"
    DUPLICATE_PATH = "DUPLICATE_PATH"
    IO_FAILURE = "IO_FAILURE"

    @property
    def kind(self) -> ErrorKind:
        return _CODE_KINDS[self]


_CODE_KINDS = {
    DiagnosticCode.DOCUMENT_UNPARSABLE: ErrorKind.DOCUMENT_UNPARSABLE,
    DiagnosticCode.FAMILY_UNRECOGNIZED: ErrorKind.FAMILY_UNRECOGNIZED,
    DiagnosticCode.TITLE_MISSING: ErrorKind.TITLE_MISSING,
    DiagnosticCode.SWAGGER_MISSING: ErrorKind.WRONG_FAMILY,
    DiagnosticCode.OPENAPI_MISSING: ErrorKind.WRONG_FAMILY,
    DiagnosticCode.MALFORMED: ErrorKind.RESOLVER_DIAGNOSTIC,
    DiagnosticCode.SCHEMA_REF: ErrorKind.RESOLVER_DIAGNOSTIC,
    DiagnosticCode.SCHEMA_UNEXPECTED: ErrorKind.RESOLVER_DIAGNOSTIC,
    DiagnosticCode.REMOTE_REF: ErrorKind.RESOLVER_DIAGNOSTIC,
    DiagnosticCode.GENERIC: ErrorKind.RESOLVER_DIAGNOSTIC,
    DiagnosticCode.EMPTY_PATHS: ErrorKind.SEMANTIC_VIOLATION,
    DiagnosticCode.EMPTY_OPERATIONS: ErrorKind.SEMANTIC_VIOLATION,
    DiagnosticCode.NULL_OPERATION: ErrorKind.SEMANTIC_VIOLATION,
    DiagnosticCode.DUPLICATE_PATH: ErrorKind.SEMANTIC_VIOLATION,
    DiagnosticCode.IO_FAILURE: ErrorKind.IO_FAILURE,
}


class Verdict(str, enum.Enum):
    """Outcome of validating one document."""

    VALID = "valid"
    VALID_WITH_WARNINGS = "valid_with_warnings"
    MALFORMED = "malformed"
    INVALID = "invalid"


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations on a path item.

    ``TRACE`` exists only in OpenAPI 3.x path items.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


# --- Validation models ---


class SpecDocument(BaseModel):
    """One input document after classification.

    ``tree`` holds the generic parsed representation (``None`` when the text
    could not be parsed). It is the raw, unresolved tree, so ``$ref`` strings
    are still visible to the reference scanner.
    """

    model_config = ConfigDict(frozen=True)

    raw_text: str = Field(repr=False)
    encoding: Encoding
    family: Family
    title: Optional[str] = None
    location: Optional[str] = None
    tree: Any = Field(default=None, repr=False, exclude=True)


class Diagnostic(BaseModel):
    """A single operator-facing finding."""

    model_config = ConfigDict(frozen=True)

    code: DiagnosticCode
    severity: Severity
    message: str
    source: DiagnosticSource = DiagnosticSource.PARSER

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.ERROR


class PathEntry(BaseModel):
    """Read-only view of one resource path and the operations it declares."""

    model_config = ConfigDict(frozen=True)

    path: str
    operations: frozenset[HTTPMethod] = frozenset()
    null_operations: tuple[HTTPMethod, ...] = ()


class ValidationReport(BaseModel):
    """Everything known about one document after validation.

    ``source`` is the file path (or ``"<inline>"``/``"<stdin>"``), ``level``
    the validation level the report was produced at.
    """

    model_config = ConfigDict(frozen=True)

    source: str = "<inline>"
    title: Optional[str] = None
    family: Family = Family.UNKNOWN
    level: int = 2
    diagnostics: tuple[Diagnostic, ...] = ()
    verdict: Verdict

    @property
    def blocking_diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.is_blocking)

    @property
    def accepted(self) -> bool:
        """Whether the gateway would import the document at this level.

        ``VALID`` is always accepted; ``VALID_WITH_WARNINGS`` only below the
        full validation level.
        """
        if self.verdict == Verdict.VALID:
            return True
        return self.verdict == Verdict.VALID_WITH_WARNINGS and self.level < 2


class BatchCounters(BaseModel):
    """Cumulative counts for one batch run.

    Frozen; :meth:`record` returns a new instance so the orchestrator threads
    the counters through each document explicitly.
    """

    model_config = ConfigDict(frozen=True)

    total_files: int = 0
    succeeded: int = 0
    failed: int = 0
    malformed: int = 0
    partially_passed: int = 0

    def record(self, report: ValidationReport) -> "BatchCounters":
        """Return the counters updated with one finished report."""
        accepted = report.accepted
        return self.model_copy(
            update={
                "total_files": self.total_files + 1,
                "succeeded": self.succeeded + (1 if accepted else 0),
                "failed": self.failed + (0 if accepted else 1),
                "malformed": self.malformed
                + (1 if report.verdict == Verdict.MALFORMED else 0),
                "partially_passed": self.partially_passed
                + (1 if report.verdict == Verdict.VALID_WITH_WARNINGS else 0),
            }
        )

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
