"""Scan a raw document tree for ``$ref`` values.

The scanner runs on the *raw* parsed tree (not the resolved one), so every
``$ref`` string written by the author is still visible. It recurses into
every mapping and list depth-first, in field order, and collects the string
value of each key literally named ``$ref``. The raw tree has no back
references, so there is no cycle handling.

A reference is **local** when its value starts with ``#/``
(``#/definitions/...`` or ``#/components/schemas/...``); anything else
(URLs, relative files such as ``./external.yaml#/Pet``) is **remote** and
must be checked for reachability by the operator.
"""

from __future__ import annotations

from typing import Any

from oasgate.parser.resolver import is_local_ref


def find_ref_values(node: Any) -> list[str]:
    """Return every ``$ref`` string in *node*, depth-first in field order."""
    refs: list[str] = []
    _collect(node, refs)
    return refs


def _collect(node: Any, refs: list[str]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref":
                if isinstance(value, str):
                    refs.append(value)
            else:
                _collect(value, refs)
    elif isinstance(node, list):
        for item in node:
            _collect(item, refs)


def is_remote_ref(ref: str) -> bool:
    return not is_local_ref(ref)


def find_remote_refs(node: Any) -> list[str]:
    """Return the remote ``$ref`` values in *node*, without duplicates, in first-seen order."""
    remote: list[str] = []
    for ref in find_ref_values(node):
        if is_remote_ref(ref) and ref not in remote:
            remote.append(ref)
    return remote
