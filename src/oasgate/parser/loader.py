"""Load OAS documents from text, files, stdin, or remote URLs.

This module handles all I/O and deserialisation for raw documents. Encoding is
decided from the text itself: content whose first non-whitespace character is
``{`` is parsed as JSON, anything else as YAML. The same rule is used for the
input documents and for remote ``$ref`` targets, so a reference to a YAML file
behaves exactly like a YAML input.

The public functions are:

* :func:`detect_encoding` -- Decide JSON vs YAML for a text blob.
* :func:`parse_text` -- Deserialise a text blob into a generic tree.
* :func:`read_source` -- Read a local file as UTF-8 text.
* :func:`read_stdin` -- Read a document from standard input.
* :func:`fetch_remote` -- Fetch remote text over HTTP(S).
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from jsonschema_path.loaders import JsonschemaSafeLoader

from oasgate.exceptions import DocumentParseError, RemoteReferenceError
from oasgate.models import Encoding


def detect_encoding(text: str) -> Encoding:
    """Return :attr:`Encoding.JSON` when *text* starts with ``{``, else YAML."""
    if text.strip().startswith("{"):
        return Encoding.JSON
    return Encoding.YAML


def parse_text(text: str, encoding: Encoding | None = None) -> Any:
    """Parse *text* as JSON or YAML into plain Python containers.

    YAML mapping keys are normalised to strings (``200:`` becomes ``"200"``)
    so that response codes and similar keys compare the same way regardless
    of the source encoding. Unquoted dates stay strings (``version: 2021-05-01``
    is the text ``"2021-05-01"``), as JSON would give them.

    Args:
        text: The raw document text.
        encoding: Force an encoding instead of detecting it.

    Returns:
        The parsed tree (usually a dict).

    Raises:
        DocumentParseError: If the text is not valid in the chosen encoding.
    """
    if encoding is None:
        encoding = detect_encoding(text)

    if encoding == Encoding.JSON:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentParseError(f"Invalid JSON: {exc}") from exc

    try:
        return _stringify_keys(yaml.load(text, Loader=JsonschemaSafeLoader))
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"Invalid YAML: {exc}") from exc


def parse_mapping(text: str, encoding: Encoding | None = None) -> dict[str, Any]:
    """Parse *text* and require the root node to be a mapping.

    Raises:
        DocumentParseError: If parsing fails or the root is not a mapping.
    """
    result = parse_text(text, encoding)
    if not isinstance(result, dict):
        found = type(result).__name__ if result is not None else "empty document"
        raise DocumentParseError(f"Document must be a JSON/YAML object (got {found})")
    return result


def read_source(path: str | Path) -> str:
    """Read a local document as UTF-8 text.

    Raises:
        OSError: If the file cannot be read. Callers turn this into an
            ``IO_FAILURE`` diagnostic.
    """
    return Path(path).read_text(encoding="utf-8")


def read_stdin() -> str:
    """Read a whole document from standard input."""
    return sys.stdin.read()


def fetch_remote(url: str, timeout: float = 30.0) -> str:
    """Fetch remote document text over HTTP(S).

    Args:
        url: The HTTP(S) URL to fetch (without a fragment).
        timeout: Request timeout in seconds.

    Returns:
        The response body as text.

    Raises:
        RemoteReferenceError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise RemoteReferenceError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise RemoteReferenceError(f"Failed to fetch {url}: {exc}") from exc
    return response.text


def _stringify_keys(node: Any) -> Any:
    if isinstance(node, dict):
        return {str(key): _stringify_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_stringify_keys(item) for item in node]
    return node
