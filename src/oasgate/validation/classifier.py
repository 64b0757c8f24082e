"""Decide what a text blob is before any validator sees it.

Classification is independent of the validation level: the same text always
yields the same encoding, family and title.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from oasgate.exceptions import DocumentParseError
from oasgate.models import (
    Diagnostic,
    DiagnosticCode,
    Family,
    Severity,
    SpecDocument,
)
from oasgate.parser.loader import detect_encoding, parse_mapping

logger = logging.getLogger(__name__)


def detect_family(tree: dict[str, Any]) -> Family:
    """Family from the discriminator field.

    ``openapi`` wins only when its value starts with ``3.``; otherwise any
    ``swagger`` key makes the document Swagger 2.0.
    """
    if "openapi" in tree and str(tree["openapi"]).startswith("3."):
        return Family.OPENAPI3
    if "swagger" in tree:
        return Family.SWAGGER2
    return Family.UNKNOWN


def read_title(tree: dict[str, Any]) -> Optional[str]:
    """``info.title`` as a string, or ``None`` when absent, blank or ``"null"``."""
    info = tree.get("info")
    if not isinstance(info, dict):
        return None
    title = info.get("title")
    if title is None:
        return None
    title = str(title)
    if not title.strip() or title == "null":
        return None
    return title


def classify_document(
    text: str, location: Optional[str] = None
) -> tuple[SpecDocument, list[Diagnostic]]:
    """Parse *text* and classify it.

    Args:
        text: Raw document text (JSON or YAML).
        location: File path of the document, or ``None`` for inline text.

    Returns:
        The classified document and the blocking diagnostics found while
        classifying. A non-empty list means no family validator may run:
        it holds exactly one of ``DOCUMENT_UNPARSABLE``,
        ``FAMILY_UNRECOGNIZED`` or ``TITLE_MISSING``.
    """
    encoding = detect_encoding(text)
    try:
        tree = parse_mapping(text, encoding)
    except DocumentParseError as exc:
        logger.debug("Could not parse %s: %s", location or "<inline>", exc)
        document = SpecDocument(
            raw_text=text, encoding=encoding, family=Family.UNKNOWN, location=location
        )
        return document, [
            _blocking(DiagnosticCode.DOCUMENT_UNPARSABLE, f"unparsable document: {exc}")
        ]

    family = detect_family(tree)
    title = read_title(tree)
    document = SpecDocument(
        raw_text=text,
        encoding=encoding,
        family=family,
        title=title,
        location=location,
        tree=tree,
    )
    logger.debug(
        "Classified %s as %s (%s)", location or "<inline>", family.value, encoding.value
    )

    if family == Family.UNKNOWN:
        return document, [
            _blocking(
                DiagnosticCode.FAMILY_UNRECOGNIZED,
                "neither swagger nor openapi discriminator field present",
            )
        ]
    if title is None:
        return document, [
            _blocking(
                DiagnosticCode.TITLE_MISSING,
                f"{family.label} definition must declare a non-empty info.title",
            )
        ]
    return document, []


def _blocking(code: DiagnosticCode, message: str) -> Diagnostic:
    return Diagnostic(code=code, severity=Severity.ERROR, message=message)

