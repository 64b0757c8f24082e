"""Classify free-text resolver messages into the stable diagnostic taxonomy.

Resolvers only emit prose, so classification is textual: an ordered table of
:class:`DiagnosticRule` entries is scanned and the first rule whose markers
are all contained in the message wins. Each rule names its
:class:`~oasgate.models.DiagnosticCode` and an optional rewrite that turns the
resolver's wording into something an operator can act on.

==  =================================  ==================  ====================================
#   Markers                            Code                Rewrite
==  =================================  ==================  ====================================
1   ``attribute swagger is missing``   SWAGGER_MISSING     wrong-family prefix
2   ``attribute openapi is missing``   OPENAPI_MISSING     wrong-family prefix
3   ``is malformed``                   MALFORMED           cause from a lenient re-parse
4   ``Unable to load remote            REMOTE_REF          remote ``$ref`` values appended
    reference``
5   ``#/components/schemas/``          SCHEMA_REF          pointer rewritten to
    (Swagger 2.0 only)                                     ``#/definitions/``
6   ``schema is unexpected``           SCHEMA_UNEXPECTED   ``$ref`` syntax hint appended
7   (anything)                         GENERIC             unchanged
==  =================================  ==================  ====================================

Rewrites are single textual substitutions; their output is never fed back
through the table. When the lenient re-parse behind rule 3 fails on a remote
reference, the message is handled by rule 4 instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from oasgate.exceptions import DocumentParseError, RemoteReferenceError, ResolverError
from oasgate.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Family,
    Severity,
)
from oasgate.parser.oas import (
    OPENAPI_MISSING_MESSAGE,
    SWAGGER_MISSING_MESSAGE,
    Resolver,
)
from oasgate.parser.resolver import REMOTE_REFERENCE_FAILURE
from oasgate.validation.references import find_remote_refs

MALFORMED_MARKER = "is malformed"
OAS3_SCHEMA_REF_PATH = "#/components/schemas/"
SWAGGER2_SCHEMA_REF_PATH = "#/definitions/"
SCHEMA_UNEXPECTED_MARKER = "schema is unexpected"


@dataclass(frozen=True)
class ClassificationContext:
    """Everything a rewrite may need besides the message itself.

    Attributes:
        family: Family of the validator that received the message.
        text: The raw document text (for the lenient re-parse).
        tree: The raw parsed tree (for the reference scan).
        location: Document location for relative remote references.
        resolver: Resolver used for the lenient re-parse.
        severity: Severity assigned to resolver diagnostics at this level.
    """

    family: Family
    text: str
    tree: Any
    location: Optional[str]
    resolver: Resolver
    severity: Severity = Severity.ERROR


Rewrite = Callable[[str, ClassificationContext], str]


@dataclass(frozen=True)
class DiagnosticRule:
    """One row of the classification table."""

    code: DiagnosticCode
    markers: tuple[str, ...] = ()
    rewrite: Optional[Rewrite] = None
    families: Optional[frozenset[Family]] = None
    source: DiagnosticSource = DiagnosticSource.PARSER

    def matches(self, message: str, family: Family) -> bool:
        if self.families is not None and family not in self.families:
            return False
        return all(marker in message for marker in self.markers)

    def apply(self, message: str, context: ClassificationContext) -> Diagnostic:
        text = self.rewrite(message, context) if self.rewrite is not None else message
        return Diagnostic(
            code=self.code,
            severity=context.severity,
            message=text,
            source=self.source,
        )


# ------------------------------------------------------------------ #
# Rewrites
# ------------------------------------------------------------------ #


def _wrong_family(label: str) -> Rewrite:
    def rewrite(message: str, context: ClassificationContext) -> str:
        return f"Invalid {label} definition found, {message}"

    return rewrite


def _explain_malformed(message: str, context: ClassificationContext) -> str:
    try:
        context.resolver.parse_lenient(context.text, context.location)
    except RemoteReferenceError:
        raise
    except (ResolverError, DocumentParseError) as exc:
        return f"{message}. Caused by: {exc}"
    return message


def _list_remote_refs(message: str, context: ClassificationContext) -> str:
    remote = find_remote_refs(context.tree)
    if not remote:
        return message
    return (
        f"{message}. Validate the following remote references and make sure "
        f"that they are valid and accessible: {', '.join(remote)}"
    )


def _to_definitions_path(message: str, context: ClassificationContext) -> str:
    return message.replace(OAS3_SCHEMA_REF_PATH, SWAGGER2_SCHEMA_REF_PATH)


def _ref_syntax_hint(message: str, context: ClassificationContext) -> str:
    pointer = (
        SWAGGER2_SCHEMA_REF_PATH if context.family == Family.SWAGGER2 else OAS3_SCHEMA_REF_PATH
    )
    return (
        f"{message}. Please verify whether the schema object is adhering to the "
        f"OpenAPI Specification. Make sure that the reference object is of format "
        f"$ref: '{pointer}{{schemaName}}'"
    )


RULES: tuple[DiagnosticRule, ...] = (
    DiagnosticRule(
        DiagnosticCode.SWAGGER_MISSING,
        (SWAGGER_MISSING_MESSAGE,),
        _wrong_family("Swagger 2.0"),
    ),
    DiagnosticRule(
        DiagnosticCode.OPENAPI_MISSING,
        (OPENAPI_MISSING_MESSAGE,),
        _wrong_family("OpenAPI 3.x"),
    ),
    DiagnosticRule(DiagnosticCode.MALFORMED, (MALFORMED_MARKER,), _explain_malformed),
    DiagnosticRule(
        DiagnosticCode.REMOTE_REF,
        (REMOTE_REFERENCE_FAILURE,),
        _list_remote_refs,
        source=DiagnosticSource.REFERENCE_SCAN,
    ),
    DiagnosticRule(
        DiagnosticCode.SCHEMA_REF,
        (OAS3_SCHEMA_REF_PATH,),
        _to_definitions_path,
        families=frozenset({Family.SWAGGER2}),
    ),
    DiagnosticRule(DiagnosticCode.SCHEMA_UNEXPECTED, (SCHEMA_UNEXPECTED_MARKER,), _ref_syntax_hint),
    DiagnosticRule(DiagnosticCode.GENERIC),
)

WRONG_FAMILY_CODES = {
    Family.SWAGGER2: DiagnosticCode.SWAGGER_MISSING,
    Family.OPENAPI3: DiagnosticCode.OPENAPI_MISSING,
}


class DiagnosticClassifier:
    """Apply a rule table to resolver messages.

    Args:
        rules: Ordered rule table; the last rule must match everything.
            Defaults to :data:`RULES`.
    """

    def __init__(self, rules: tuple[DiagnosticRule, ...] = RULES) -> None:
        self._rules = rules

    def match(self, message: str, family: Family) -> DiagnosticRule:
        """Return the first rule matching *message* in *family* context."""
        for rule in self._rules:
            if rule.matches(message, family):
                return rule
        raise LookupError(f"no diagnostic rule matches {message!r}")

    def code_for(self, message: str, family: Family) -> DiagnosticCode:
        return self.match(message, family).code

    def is_wrong_family(self, message: str, family: Family) -> bool:
        """True when *message* says the document is not of *family* at all."""
        return self.code_for(message, family) == WRONG_FAMILY_CODES.get(family)

    def classify(self, message: str, context: ClassificationContext) -> Diagnostic:
        """Turn one raw resolver message into a :class:`Diagnostic`."""
        rule = self.match(message, context.family)
        try:
            return rule.apply(message, context)
        except RemoteReferenceError:
            return self._rule(DiagnosticCode.REMOTE_REF).apply(message, context)

    def _rule(self, code: DiagnosticCode) -> DiagnosticRule:
        for rule in self._rules:
            if rule.code == code:
                return rule
        raise LookupError(f"no diagnostic rule for {code.value}")
