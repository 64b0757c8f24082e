"""Diagnostic orchestration -- classify, validate and aggregate OAS documents.

This sub-package turns document text into :class:`~oasgate.models.ValidationReport`
values and batch counters. It talks to the resolver only through the
:class:`~oasgate.parser.oas.Resolver` protocol.

Typical usage::

    from oasgate.parser import SpecResolver
    from oasgate.validation import run_batch

    for report, counters in run_batch("location:./definitions", 2, SpecResolver()):
        print(report.source, report.verdict.value)

Sub-modules:

* :mod:`~oasgate.validation.classifier` -- Encoding, family and title detection.
* :mod:`~oasgate.validation.validators` -- Swagger 2.0 and OpenAPI 3.x
  family validators.
* :mod:`~oasgate.validation.diagnostics` -- Ordered rule table mapping
  resolver messages to diagnostic codes.
* :mod:`~oasgate.validation.paths` -- Semantic resource-path checks.
* :mod:`~oasgate.validation.references` -- ``$ref`` scanner.
* :mod:`~oasgate.validation.policy` -- The three validation levels.
* :mod:`~oasgate.validation.orchestrator` -- Source iteration and batch runs.
"""

from oasgate.validation.classifier import classify_document
from oasgate.validation.orchestrator import (
    BatchOrchestrator,
    DocumentSource,
    iter_sources,
    process_source,
    run_batch,
    validate_document,
)
from oasgate.validation.policy import ValidationLevel, policy_for
from oasgate.validation.validators import OpenAPI3Validator, Swagger2Validator

__all__ = [
    "classify_document",
    "BatchOrchestrator",
    "DocumentSource",
    "iter_sources",
    "process_source",
    "run_batch",
    "validate_document",
    "ValidationLevel",
    "policy_for",
    "OpenAPI3Validator",
    "Swagger2Validator",
]
