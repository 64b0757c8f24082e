"""Tests for oasgate.validation.policy."""

from __future__ import annotations

import pytest

from oasgate.models import Family, Severity, ValidationReport, Verdict
from oasgate.validation.policy import (
    ValidationLevel,
    acceptance_line,
    policy_for,
    verdict_line,
)


class TestPolicies:
    def test_level_zero(self) -> None:
        policy = policy_for(0)
        assert policy.level == ValidationLevel.PARSE_ONLY
        assert not policy.emit_resolver_diagnostics
        assert not policy.run_semantic_checks

    def test_level_one(self) -> None:
        policy = policy_for(1)
        assert policy.emit_resolver_diagnostics
        assert policy.resolver_severity == Severity.WARNING
        assert not policy.run_semantic_checks

    def test_level_two(self) -> None:
        policy = policy_for(2)
        assert policy.resolver_severity == Severity.ERROR
        assert policy.run_semantic_checks

    @pytest.mark.parametrize("level", [-1, 3])
    def test_invalid_level(self, level: int) -> None:
        with pytest.raises(ValueError):
            policy_for(level)


class TestLines:
    def test_accepted_at_level_one(self) -> None:
        report = ValidationReport(
            family=Family.SWAGGER2, level=1, verdict=Verdict.VALID_WITH_WARNINGS
        )
        assert verdict_line(report) == (
            "Swagger passed with errors, using it may lead to functionality issues"
        )
        assert acceptance_line(report) == (
            "Swagger file will be accepted by the level 1 validation of APIM 4.0.0"
        )

    def test_valid_at_level_two(self) -> None:
        report = ValidationReport(family=Family.OPENAPI3, level=2, verdict=Verdict.VALID)
        assert verdict_line(report) == "OpenAPI file is valid"
        assert acceptance_line(report) == "OpenAPI file will be accepted by APIM 4.2.0"

    def test_warnings_rejected_at_level_two(self) -> None:
        report = ValidationReport(
            family=Family.OPENAPI3, level=2, verdict=Verdict.VALID_WITH_WARNINGS
        )
        assert acceptance_line(report) is None

    def test_malformed(self) -> None:
        report = ValidationReport(family=Family.SWAGGER2, level=2, verdict=Verdict.MALFORMED)
        assert verdict_line(report).startswith("Malformed Swagger")
        assert acceptance_line(report) is None

    def test_unknown_family_label(self) -> None:
        report = ValidationReport(verdict=Verdict.INVALID)
        assert verdict_line(report) == "Invalid OAS definition, it cannot be imported"
