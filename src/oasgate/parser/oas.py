"""Default OAS-resolution capability: dereference and structurally validate documents.

The validation layer talks to resolvers only through the :class:`Resolver`
protocol:

* ``resolve_swagger2(text, location)`` / ``resolve_openapi3(text, location)``
  return a :class:`ResolutionResult` -- the resolved document (or ``None``
  when the text cannot be rendered into the requested family) plus a list of
  free-text messages.
* ``parse_lenient(text, location)`` loads and strictly dereferences a
  document without structural validation. It is the secondary parse used to
  explain "malformed" messages.

:class:`SpecResolver` is the implementation shipped with oasgate. It
dereferences with :class:`~oasgate.parser.resolver.ReferenceResolver` and then
runs ``openapi-spec-validator`` on the dereferenced tree, translating every
``jsonschema`` error into resolver wording such as
``attribute info.title is missing`` or
``attribute paths./pets.get.responses.200.schema is unexpected``. The
diagnostic classifier keys its rules off that wording.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Protocol

from jsonschema.exceptions import ValidationError, best_match
from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)
from referencing.exceptions import Unresolvable

from oasgate.exceptions import DocumentParseError
from oasgate.models import Family
from oasgate.parser.loader import parse_mapping
from oasgate.parser.resolver import ReferenceResolver, RemoteLoader, resolve_refs

logger = logging.getLogger(__name__)

SWAGGER_MISSING_MESSAGE = "attribute swagger is missing"
OPENAPI_MISSING_MESSAGE = "attribute openapi is missing"

_QUOTED = re.compile(r"'([^']+)'")


@dataclass(frozen=True)
class ResolvedDocument:
    """A document rendered into one OAS family with its references dereferenced.

    Attributes:
        family: The family the document was rendered as.
        version: The declared ``swagger``/``openapi`` version string.
        tree: The dereferenced document tree.
    """

    family: Family
    version: str
    tree: dict[str, Any] = field(repr=False)

    @property
    def paths(self) -> Optional[dict[str, Any]]:
        """The ``paths`` mapping, or ``None`` when absent or not a mapping."""
        paths = self.tree.get("paths")
        return paths if isinstance(paths, dict) else None


@dataclass(frozen=True)
class ResolutionResult:
    """What a resolver returns for one document."""

    document: Optional[ResolvedDocument]
    messages: list[str] = field(default_factory=list)


class Resolver(Protocol):
    """The OAS-resolution capability consumed by the family validators."""

    def resolve_swagger2(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        ...

    def resolve_openapi3(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        ...

    def parse_lenient(self, text: str, location: Optional[str] = None) -> dict[str, Any]:
        ...


class SpecResolver:
    """Resolver backed by ``openapi-spec-validator``.

    Args:
        loader: Loader used for remote references. Defaults to a
            :class:`~oasgate.parser.resolver.RemoteLoader` with network
            access enabled.

    Example::

        resolver = SpecResolver()
        result = resolver.resolve_openapi3(text, location="petstore.yaml")
        if result.document is None:
            print("could not render the definition")
        for message in result.messages:
            print(message)
    """

    def __init__(self, loader: Optional[RemoteLoader] = None) -> None:
        self._loader = loader if loader is not None else RemoteLoader()

    def resolve_swagger2(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        """Resolve *text* as a Swagger 2.0 document (full dereferencing)."""
        try:
            tree = parse_mapping(text)
        except DocumentParseError as exc:
            return ResolutionResult(None, [f"Unable to parse document content: {exc}"])

        if "swagger" not in tree:
            return ResolutionResult(None, [SWAGGER_MISSING_MESSAGE])

        version = str(tree["swagger"])
        if version != "2.0":
            return ResolutionResult(
                None, [f"attribute swagger is not of value `2.0` (found `{version}`)"]
            )

        return self._resolve(tree, Family.SWAGGER2, version, location)

    def resolve_openapi3(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        """Resolve *text* as an OpenAPI 3.x document."""
        try:
            tree = parse_mapping(text)
        except DocumentParseError as exc:
            return ResolutionResult(None, [f"Unable to parse document content: {exc}"])

        if "openapi" not in tree:
            return ResolutionResult(None, [OPENAPI_MISSING_MESSAGE])

        version = str(tree["openapi"])
        if not version.startswith("3."):
            return ResolutionResult(
                None, [f"attribute openapi is not of value `3.x` (found `{version}`)"]
            )

        return self._resolve(tree, Family.OPENAPI3, version, location)

    def parse_lenient(self, text: str, location: Optional[str] = None) -> dict[str, Any]:
        """Load *text* and strictly dereference it, without structural validation.

        Raises:
            DocumentParseError: If the text cannot be parsed.
            RemoteReferenceError: If a remote reference cannot be loaded.
            ResolverError: If a local pointer does not exist.
        """
        tree = parse_mapping(text)
        resolver = ReferenceResolver(base_location=location, loader=self._loader, strict=True)
        return resolver.resolve(tree)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _resolve(
        self,
        tree: dict[str, Any],
        family: Family,
        version: str,
        location: Optional[str],
    ) -> ResolutionResult:
        resolved, messages = resolve_refs(tree, location, self._loader)
        messages.extend(_structural_messages(resolved, family, version))
        logger.debug(
            "Resolved %s document (version %s) with %d message(s)",
            family.value,
            version,
            len(messages),
        )
        return ResolutionResult(ResolvedDocument(family, version, resolved), messages)


def _validator_for(family: Family, version: str, tree: dict[str, Any]) -> Any:
    if family == Family.SWAGGER2:
        return OpenAPIV2SpecValidator(tree)
    if version.startswith("3.0"):
        return OpenAPIV30SpecValidator(tree)
    return OpenAPIV31SpecValidator(tree)


def _structural_messages(tree: dict[str, Any], family: Family, version: str) -> list[str]:
    messages: list[str] = []
    try:
        for error in _validator_for(family, version, tree).iter_errors():
            for message in describe_error(error):
                if message not in messages:
                    messages.append(message)
    except Unresolvable as exc:
        messages.append(f"Unable to validate the definition: {exc}")
    return messages


def describe_error(error: ValidationError) -> Iterator[str]:
    """Translate one ``jsonschema`` validation error into resolver wording.

    ``oneOf``/``anyOf`` failures are narrowed to their most relevant
    sub-error first.
    """
    if error.context:
        error = best_match(error.context) or error

    location = ".".join(str(part) for part in error.absolute_path)
    prefix = f"{location}." if location else ""

    if error.validator == "required":
        present = error.instance if isinstance(error.instance, dict) else {}
        for name in error.validator_value:
            if name not in present:
                yield f"attribute {prefix}{name} is missing"
        return

    if error.validator in ("additionalProperties", "unevaluatedProperties"):
        extras = _QUOTED.findall(error.message) or ["<unknown>"]
        for name in extras:
            yield f"attribute {prefix}{name} is unexpected"
        return

    if error.validator == "type":
        target = location or "document"
        if error.validator_value == "object":
            yield f"attribute {target} is malformed, expected type `object`"
        else:
            yield f"attribute {target} is not of type `{error.validator_value}`"
        return

    if location:
        yield f"{location}: {error.message}"
    else:
        yield error.message
