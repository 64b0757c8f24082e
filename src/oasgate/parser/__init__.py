"""Default OAS-resolution capability -- load, resolve ``$ref`` pointers, validate structure.

This sub-package turns raw document text into a resolved document plus the
free-text messages the validation layer classifies. The validation layer
depends only on the :class:`~oasgate.parser.oas.Resolver` protocol, so any
other resolver with the same wording can be plugged in.

Typical usage::

    from oasgate.parser import SpecResolver

    result = SpecResolver().resolve_swagger2(text, location="petstore.json")
    result.document   # ResolvedDocument or None
    result.messages   # list of free-text resolver messages

Sub-modules:

* :mod:`~oasgate.parser.loader` -- I/O layer (text, file, stdin, URL) plus
  JSON/YAML detection.
* :mod:`~oasgate.parser.resolver` -- Recursive ``$ref`` resolution with
  remote loading and circular-reference detection.
* :mod:`~oasgate.parser.oas` -- :class:`SpecResolver`, built on
  ``openapi-spec-validator``.
"""

from oasgate.parser.loader import detect_encoding, parse_mapping, parse_text
from oasgate.parser.oas import (
    ResolutionResult,
    ResolvedDocument,
    Resolver,
    SpecResolver,
)
from oasgate.parser.resolver import ReferenceResolver, RemoteLoader

__all__ = [
    "detect_encoding",
    "parse_mapping",
    "parse_text",
    "ResolutionResult",
    "ResolvedDocument",
    "Resolver",
    "SpecResolver",
    "ReferenceResolver",
    "RemoteLoader",
]
