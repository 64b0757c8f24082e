"""The three validation levels and what each one enforces.

=====  ==============  ====================================================
Level  Name            Behaviour
=====  ==============  ====================================================
0      parse-only      Only checks that the resolver returns a document;
                       resolver messages are not reported.
1      compatibility   Resolver messages are reported as warnings; a
                       document that still resolves is accepted.
2      full            Resolver messages are errors and the semantic path
                       checks run; any finding rejects the document.
=====  ==============  ====================================================

Raising the level only adds checks or raises severities, so the blocking
diagnostics at a lower level are always a subset of those at a higher one.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from oasgate.models import Severity, ValidationReport, Verdict


class ValidationLevel(enum.IntEnum):
    PARSE_ONLY = 0
    COMPATIBILITY = 1
    FULL = 2


class LevelPolicy(BaseModel):
    """What one validation level enforces."""

    model_config = ConfigDict(frozen=True)

    level: ValidationLevel
    emit_resolver_diagnostics: bool
    resolver_severity: Severity
    run_semantic_checks: bool
    acceptance: str


POLICIES: dict[ValidationLevel, LevelPolicy] = {
    ValidationLevel.PARSE_ONLY: LevelPolicy(
        level=ValidationLevel.PARSE_ONLY,
        emit_resolver_diagnostics=False,
        resolver_severity=Severity.INFO,
        run_semantic_checks=False,
        acceptance="{label} definition is returned by the resolver (validation disabled)",
    ),
    ValidationLevel.COMPATIBILITY: LevelPolicy(
        level=ValidationLevel.COMPATIBILITY,
        emit_resolver_diagnostics=True,
        resolver_severity=Severity.WARNING,
        run_semantic_checks=False,
        acceptance="{label} file will be accepted by the level 1 validation of APIM 4.0.0",
    ),
    ValidationLevel.FULL: LevelPolicy(
        level=ValidationLevel.FULL,
        emit_resolver_diagnostics=True,
        resolver_severity=Severity.ERROR,
        run_semantic_checks=True,
        acceptance="{label} file will be accepted by APIM 4.2.0",
    ),
}

_VERDICT_LINES = {
    Verdict.VALID: "{label} file is valid",
    Verdict.VALID_WITH_WARNINGS: "{label} passed with errors, using it may lead to functionality issues",
    Verdict.MALFORMED: "Malformed {label}, please fix the listed issues before proceeding",
    Verdict.INVALID: "Invalid {label} definition, it cannot be imported",
}


def policy_for(level: int) -> LevelPolicy:
    """Return the policy for *level*.

    Raises:
        ValueError: If *level* is not 0, 1 or 2.
    """
    return POLICIES[ValidationLevel(level)]


def verdict_line(report: ValidationReport) -> str:
    """Operator-facing sentence describing the report's verdict."""
    return _VERDICT_LINES[report.verdict].format(label=report.family.label)


def acceptance_line(report: ValidationReport) -> str | None:
    """The "will be accepted by" sentence, or ``None`` when the report is rejected."""
    if not report.accepted:
        return None
    return policy_for(report.level).acceptance.format(label=report.family.label)