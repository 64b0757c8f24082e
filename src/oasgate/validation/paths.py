"""Resource-path checks the resolver does not perform.

Swagger 2.0 and OpenAPI 3.x path items differ only in which HTTP methods
they may declare (OpenAPI 3.x adds ``trace``). Path items are wrapped in a
small tagged variant -- :class:`Swagger2PathItem` or :class:`OpenAPI3PathItem`
-- with one ``declared_methods()`` accessor, so every check here is written
once for both families.

Checks, each returning diagnostics (never raising):

* :func:`check_empty_paths` -- the document declares no resource paths.
* :func:`check_operations` -- a path declares no operation, or declares a
  method whose operation object is null.
* :func:`find_duplicate_path` -- two paths that differ only by a trailing
  slash declare the same HTTP method. The gateway deploys both as one
  resource, so method dispatch would be ambiguous.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from oasgate.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Family,
    HTTPMethod,
    PathEntry,
    Severity,
)

# Methods compared by the trailing-slash check.
DISPATCH_METHODS: tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.POST,
    HTTPMethod.PUT,
    HTTPMethod.PATCH,
    HTTPMethod.DELETE,
    HTTPMethod.HEAD,
    HTTPMethod.OPTIONS,
)


@dataclass(frozen=True)
class PathItem:
    """One resource path and its raw path-item mapping."""

    path: str
    item: Any

    METHODS: ClassVar[tuple[HTTPMethod, ...]] = ()

    def _mapping(self) -> dict[str, Any]:
        return self.item if isinstance(self.item, dict) else {}

    def declared_methods(self) -> frozenset[HTTPMethod]:
        """Methods declared with a non-null operation object."""
        mapping = self._mapping()
        return frozenset(
            method for method in self.METHODS if mapping.get(method.value) is not None
        )

    def null_methods(self) -> tuple[HTTPMethod, ...]:
        """Methods whose key is present but whose operation object is null."""
        mapping = self._mapping()
        return tuple(
            method
            for method in self.METHODS
            if method.value in mapping and mapping[method.value] is None
        )

    def to_entry(self) -> PathEntry:
        return PathEntry(
            path=self.path,
            operations=self.declared_methods(),
            null_operations=self.null_methods(),
        )


@dataclass(frozen=True)
class Swagger2PathItem(PathItem):
    METHODS: ClassVar[tuple[HTTPMethod, ...]] = (
        HTTPMethod.GET,
        HTTPMethod.PUT,
        HTTPMethod.POST,
        HTTPMethod.DELETE,
        HTTPMethod.OPTIONS,
        HTTPMethod.HEAD,
        HTTPMethod.PATCH,
    )


@dataclass(frozen=True)
class OpenAPI3PathItem(PathItem):
    METHODS: ClassVar[tuple[HTTPMethod, ...]] = Swagger2PathItem.METHODS + (HTTPMethod.TRACE,)


_PATH_ITEM_TYPES: dict[Family, type[PathItem]] = {
    Family.SWAGGER2: Swagger2PathItem,
    Family.OPENAPI3: OpenAPI3PathItem,
}


def path_items(paths: Optional[dict[str, Any]], family: Family) -> list[PathItem]:
    """Wrap every entry of a ``paths`` mapping, in key order.

    ``x-`` extension keys are not resource paths and are skipped.
    """
    if not paths:
        return []
    item_type = _PATH_ITEM_TYPES[family]
    return [item_type(path, item) for path, item in paths.items() if not path.startswith("x-")]


def path_entries(paths: Optional[dict[str, Any]], family: Family) -> list[PathEntry]:
    return [item.to_entry() for item in path_items(paths, family)]


def _semantic(code: DiagnosticCode, message: str) -> Diagnostic:
    return Diagnostic(
        code=code,
        severity=Severity.ERROR,
        message=message,
        source=DiagnosticSource.SEMANTIC_CHECK,
    )


def check_empty_paths(entries: list[PathEntry]) -> list[Diagnostic]:
    if entries:
        return []
    return [_semantic(DiagnosticCode.EMPTY_PATHS, "resource paths cannot be empty")]


def check_operations(entries: list[PathEntry]) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for entry in entries:
        if not entry.operations:
            diagnostics.append(
                _semantic(
                    DiagnosticCode.EMPTY_OPERATIONS,
                    f"operations cannot be empty for resource path `{entry.path}`",
                )
            )
        for method in entry.null_operations:
            diagnostics.append(
                _semantic(
                    DiagnosticCode.NULL_OPERATION,
                    f"operation object cannot be empty for method `{method.value}` "
                    f"in path `{entry.path}`",
                )
            )
    return diagnostics


def find_duplicate_path(entries: list[PathEntry]) -> Optional[Diagnostic]:
    """Return a diagnostic for the first trailing-slash conflict, or ``None``.

    For each path ending in ``/`` (in mapping order) whose slash-stripped
    sibling is also declared, the two paths conflict when they declare a
    common method from :data:`DISPATCH_METHODS`.
    """
    by_path = {entry.path: entry for entry in entries}
    for entry in entries:
        if not entry.path.endswith("/"):
            continue
        sibling = by_path.get(entry.path[:-1])
        if sibling is None:
            continue
        overlap = [
            method
            for method in DISPATCH_METHODS
            if method in entry.operations and method in sibling.operations
        ]
        if overlap:
            methods = ", ".join(method.value.upper() for method in overlap)
            return _semantic(
                DiagnosticCode.DUPLICATE_PATH,
                f"resource paths `{sibling.path}` and `{entry.path}` both declare {methods}; "
                "paths differing only by a trailing slash are deployed as the same resource",
            )
    return None


def run_semantic_checks(paths: Optional[dict[str, Any]], family: Family) -> list[Diagnostic]:
    """Run every path check and return all violations together."""
    entries = path_entries(paths, family)
    diagnostics = check_empty_paths(entries)
    diagnostics.extend(check_operations(entries))
    duplicate = find_duplicate_path(entries)
    if duplicate is not None:
        diagnostics.append(duplicate)
    return diagnostics
