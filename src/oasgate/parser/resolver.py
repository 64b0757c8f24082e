"""Resolve ``$ref`` JSON Reference pointers in Swagger/OpenAPI documents.

Swagger and OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/definitions/Pet"}``) to avoid repetition. This module performs
a recursive deep-copy traversal of a document, replacing every ``$ref`` with
the object it points to.

* **Local** references (``#/...``) resolve against the document that
  contains them.
* **Remote** references (URLs, or file paths relative to the containing
  document) are loaded through a :class:`RemoteLoader`, parsed with the same
  JSON/YAML rules as input documents, and resolved recursively relative to
  their own location.

Circular references are detected via a ``seen`` set and left unresolved (the
``$ref`` dict is kept at the cycle point) to prevent infinite recursion.

Resolution runs in one of two modes:

* **collecting** (default) -- every failure is recorded as a message in
  :attr:`ReferenceResolver.messages` and the failing node is replaced with an
  empty mapping so the rest of the document can still be validated.
* **strict** -- the first failure raises
  :class:`~oasgate.exceptions.RemoteReferenceError` (remote load failures) or
  :class:`~oasgate.exceptions.ResolverError` (missing pointers).
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin

from oasgate.cache import RemoteReferenceCache
from oasgate.exceptions import DocumentParseError, RemoteReferenceError, ResolverError
from oasgate.parser.loader import fetch_remote, parse_text, read_source

logger = logging.getLogger(__name__)

REMOTE_REFERENCE_FAILURE = "Unable to load remote reference"


def is_local_ref(ref: str) -> bool:
    """Return True if *ref* points inside the current document (``#/...``)."""
    return ref.startswith("#/")


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class RemoteLoader:
    """Load and parse documents referenced by remote ``$ref`` values.

    Args:
        enabled: When ``False`` every remote reference fails with a
            "remote reference loading is disabled" reason.
        timeout: HTTP timeout in seconds for URL references.
        cache: Optional :class:`~oasgate.cache.RemoteReferenceCache` for URL
            references.
    """

    def __init__(
        self,
        enabled: bool = True,
        timeout: float = 30.0,
        cache: Optional[RemoteReferenceCache] = None,
    ) -> None:
        self.enabled = enabled
        self.timeout = timeout
        self._cache = cache

    def load(self, location: str) -> Any:
        """Fetch (or read) *location* and parse it.

        Raises:
            RemoteReferenceError: If loading or parsing fails.
        """
        if not self.enabled:
            raise RemoteReferenceError("remote reference loading is disabled")

        text = self._read(location)
        try:
            return parse_text(text)
        except DocumentParseError as exc:
            raise RemoteReferenceError(f"{location} is not valid JSON/YAML: {exc}") from exc

    def _read(self, location: str) -> str:
        if not _is_url(location):
            try:
                return read_source(location)
            except OSError as exc:
                raise RemoteReferenceError(f"cannot read {location}: {exc}") from exc

        if self._cache is not None:
            cached = self._cache.get(location)
            if cached is not None:
                logger.debug("Remote reference cache hit: %s", location)
                return cached

        logger.debug("Fetching remote reference %s", location)
        text = fetch_remote(location, timeout=self.timeout)
        if self._cache is not None:
            self._cache.set(location, text)
        return text


class ReferenceResolver:
    """Dereference every ``$ref`` in one document.

    Args:
        base_location: File path or URL of the document, used to resolve
            relative remote references. ``None`` for inline text.
        loader: Loader for remote references. Defaults to a
            :class:`RemoteLoader` with network access enabled.
        strict: Raise on the first failure instead of collecting messages.

    Example::

        resolver = ReferenceResolver(base_location="specs/petstore.yaml")
        resolved = resolver.resolve(tree)
        for message in resolver.messages:
            print(message)
    """

    def __init__(
        self,
        base_location: Optional[str] = None,
        loader: Optional[RemoteLoader] = None,
        strict: bool = False,
    ) -> None:
        self._base_location = base_location
        self._loader = loader if loader is not None else RemoteLoader()
        self._strict = strict
        self._documents: dict[str, Any] = {}
        self._load_failures: dict[str, str] = {}
        self.messages: list[str] = []

    def resolve(self, tree: Any) -> Any:
        """Return a deep copy of *tree* with all resolvable ``$ref`` pointers replaced.

        The input is never mutated.

        Raises:
            RemoteReferenceError: Strict mode only, when a remote reference
                cannot be loaded.
            ResolverError: Strict mode only, when a pointer does not exist.
        """
        root = copy.deepcopy(tree)
        return self._deep_resolve(root, root, self._base_location, frozenset())

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #

    def _deep_resolve(
        self,
        obj: Any,
        root: Any,
        base: Optional[str],
        seen: frozenset[str],
    ) -> Any:
        if isinstance(obj, dict):
            ref = obj.get("$ref")
            if isinstance(ref, str):
                return self._resolve_node(obj, ref, root, base, seen)
            return {key: self._deep_resolve(value, root, base, seen) for key, value in obj.items()}

        if isinstance(obj, list):
            return [self._deep_resolve(item, root, base, seen) for item in obj]

        return obj

    def _resolve_node(
        self,
        node: dict[str, Any],
        ref: str,
        root: Any,
        base: Optional[str],
        seen: frozenset[str],
    ) -> Any:
        document_part, _, pointer = ref.partition("#")

        if document_part:
            try:
                location = self._absolute_location(document_part, base)
                target_root = self._load(location)
            except RemoteReferenceError as exc:
                return self._fail_remote(ref, str(exc))
        else:
            location = base
            target_root = root

        key = f"{location or ''}#{pointer}"
        if key in seen:
            # Circular reference -- keep the $ref dict unresolved
            return node

        try:
            target = _follow_pointer(target_root, pointer)
        except ResolverError as exc:
            return self._fail_local(ref, str(exc))

        return self._deep_resolve(copy.deepcopy(target), target_root, location, seen | {key})

    def _absolute_location(self, document_part: str, base: Optional[str]) -> str:
        if _is_url(document_part):
            return document_part
        if base is not None and _is_url(base):
            return urljoin(base, document_part)
        if base is not None:
            return str((Path(base).parent / document_part).resolve())
        if Path(document_part).is_absolute():
            return document_part
        raise RemoteReferenceError(
            f"relative reference {document_part} has no document location to resolve against"
        )

    def _load(self, location: str) -> Any:
        if location in self._documents:
            return self._documents[location]
        if location in self._load_failures:
            raise RemoteReferenceError(self._load_failures[location])
        try:
            document = self._loader.load(location)
        except RemoteReferenceError as exc:
            self._load_failures[location] = str(exc)
            raise
        self._documents[location] = document
        return document

    # ------------------------------------------------------------------ #
    # Failure handling
    # ------------------------------------------------------------------ #

    def _fail_remote(self, ref: str, reason: str) -> dict[str, Any]:
        message = f"{REMOTE_REFERENCE_FAILURE} {ref}: {reason}"
        if self._strict:
            raise RemoteReferenceError(message)
        self._record(message)
        return {}

    def _fail_local(self, ref: str, reason: str) -> dict[str, Any]:
        message = f"reference {ref} could not be resolved: {reason}"
        if self._strict:
            raise ResolverError(message)
        self._record(message)
        return {}

    def _record(self, message: str) -> None:
        if message not in self.messages:
            logger.debug("Reference problem: %s", message)
            self.messages.append(message)


def resolve_refs(
    tree: Any,
    base_location: Optional[str] = None,
    loader: Optional[RemoteLoader] = None,
) -> tuple[Any, list[str]]:
    """Resolve all ``$ref`` pointers in *tree* in collecting mode.

    Returns:
        A ``(resolved_tree, messages)`` tuple.
    """
    resolver = ReferenceResolver(base_location=base_location, loader=loader)
    resolved = resolver.resolve(tree)
    return resolved, list(resolver.messages)


def _follow_pointer(document: Any, pointer: str) -> Any:
    """Navigate *document* along a JSON Pointer (RFC 6901).

    An empty pointer returns the whole document.

    Raises:
        ResolverError: If any segment does not exist.
    """
    if pointer in ("", "/"):
        return document

    current: Any = document
    for segment in pointer.lstrip("/").split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise ResolverError(f"key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ResolverError(f"invalid array index '{segment}'") from exc
        else:
            raise ResolverError(f"cannot navigate into {type(current).__name__}")

    return current
