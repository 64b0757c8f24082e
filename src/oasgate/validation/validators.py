"""Family validators: turn a classified document into a :class:`ValidationReport`.

:class:`Swagger2Validator` and :class:`OpenAPI3Validator` differ only in which
resolver entry point they call. Everything else -- the wrong-family check,
message classification, the level policy and the semantic path checks -- is
implemented once in :class:`FamilyValidator`.

**Verdict rules**

* Level 0: no diagnostics; ``VALID`` when the resolver produced a document,
  ``MALFORMED`` otherwise.
* Level 1 and 2: with resolver messages, ``VALID_WITH_WARNINGS`` when a
  document came back, ``MALFORMED`` otherwise. Without messages and without a
  document the verdict is ``MALFORMED`` with an "unable to render" diagnostic.
* Level 2: the semantic checks also run on the resolved document; any
  violation forces ``MALFORMED``.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from oasgate.exceptions import WrongFamilyError
from oasgate.models import (
    Diagnostic,
    DiagnosticCode,
    Family,
    SpecDocument,
    ValidationReport,
    Verdict,
)
from oasgate.parser.oas import ResolutionResult, Resolver
from oasgate.validation.diagnostics import ClassificationContext, DiagnosticClassifier
from oasgate.validation.paths import run_semantic_checks
from oasgate.validation.policy import LevelPolicy, policy_for

logger = logging.getLogger(__name__)

UNRENDERABLE_MESSAGE = "unable to render the definition"


class FamilyValidator:
    """Validate documents of one OAS family.

    Args:
        resolver: The OAS-resolution capability.
        classifier: Diagnostic classifier; defaults to the standard rule table.
    """

    family: ClassVar[Family] = Family.UNKNOWN

    def __init__(
        self,
        resolver: Resolver,
        classifier: Optional[DiagnosticClassifier] = None,
    ) -> None:
        self.resolver = resolver
        self.classifier = classifier if classifier is not None else DiagnosticClassifier()

    def resolve(self, text: str, location: Optional[str]) -> ResolutionResult:
        raise NotImplementedError

    def validate(self, document: SpecDocument, level: int) -> ValidationReport:
        """Validate *document* at *level*.

        Raises:
            WrongFamilyError: If the resolver reports that this family's
                discriminator is missing. No report is produced; the caller
                is expected to retry with the other family.
            ValueError: If *level* is not 0, 1 or 2.
        """
        policy = policy_for(level)
        result = self.resolve(document.raw_text, document.location)
        context = ClassificationContext(
            family=self.family,
            text=document.raw_text,
            tree=document.tree,
            location=document.location,
            resolver=self.resolver,
            severity=policy.resolver_severity,
        )
        self._raise_on_wrong_family(result.messages, context)

        diagnostics: list[Diagnostic] = []
        if policy.emit_resolver_diagnostics:
            diagnostics.extend(
                self.classifier.classify(message, context) for message in result.messages
            )
        verdict = self._resolver_verdict(result, policy, diagnostics)

        if policy.run_semantic_checks and result.document is not None:
            violations = run_semantic_checks(result.document.paths, self.family)
            if violations:
                diagnostics.extend(violations)
                verdict = Verdict.MALFORMED

        logger.debug(
            "%s validation of %s at level %d: %s (%d diagnostic(s))",
            self.family.label,
            document.location or "<inline>",
            level,
            verdict.value,
            len(diagnostics),
        )
        return ValidationReport(
            source=document.location or "<inline>",
            title=document.title,
            family=self.family,
            level=level,
            diagnostics=tuple(diagnostics),
            verdict=verdict,
        )

    def _raise_on_wrong_family(
        self, messages: list[str], context: ClassificationContext
    ) -> None:
        for message in messages:
            if self.classifier.is_wrong_family(message, self.family):
                raise WrongFamilyError(self.classifier.classify(message, context))

    @staticmethod
    def _resolver_verdict(
        result: ResolutionResult, policy: LevelPolicy, diagnostics: list[Diagnostic]
    ) -> Verdict:
        has_document = result.document is not None
        if not policy.emit_resolver_diagnostics:
            return Verdict.VALID if has_document else Verdict.MALFORMED
        if result.messages:
            return Verdict.VALID_WITH_WARNINGS if has_document else Verdict.MALFORMED
        if not has_document:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.GENERIC,
                    severity=policy.resolver_severity,
                    message=UNRENDERABLE_MESSAGE,
                )
            )
            return Verdict.MALFORMED
        return Verdict.VALID


class Swagger2Validator(FamilyValidator):
    """Swagger 2.0: resolve, flatten and fully dereference."""

    family = Family.SWAGGER2

    def resolve(self, text: str, location: Optional[str]) -> ResolutionResult:
        return self.resolver.resolve_swagger2(text, location)


class OpenAPI3Validator(FamilyValidator):
    """OpenAPI 3.x: reference resolution."""

    family = Family.OPENAPI3

    def resolve(self, text: str, location: Optional[str]) -> ResolutionResult:
        return self.resolver.resolve_openapi3(text, location)


VALIDATORS: dict[Family, type[FamilyValidator]] = {
    Family.SWAGGER2: Swagger2Validator,
    Family.OPENAPI3: OpenAPI3Validator,
}


def validator_for(
    family: Family,
    resolver: Resolver,
    classifier: Optional[DiagnosticClassifier] = None,
) -> FamilyValidator:
    """Instantiate the validator for *family*.

    Raises:
        KeyError: If *family* is ``UNKNOWN``.
    """
    return VALIDATORS[family](resolver, classifier)
