"""Shared test fixtures for oasgate.

Provides a programmable stub resolver, document factories, isolated config
environments, output state management and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from oasgate.models import Family
from oasgate.output import OutputFormat, OutputManager, reset_output, set_output
from oasgate.parser.loader import parse_mapping
from oasgate.parser.oas import ResolutionResult, ResolvedDocument

PETS_PATHS: dict[str, Any] = {
    "/pets": {"get": {"responses": {"200": {"description": "ok"}}}},
}

_OMIT = object()


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Stub resolver
# ---------------------------------------------------------------------------


class StubResolver:
    """Resolver double with programmable messages.

    By default both families render the parsed input text as the resolved
    document and report no messages. Tests program ``messages``,
    ``render`` and ``lenient_error`` per case.
    """

    def __init__(self) -> None:
        self.messages: dict[Family, list[str]] = {Family.SWAGGER2: [], Family.OPENAPI3: []}
        self.render: dict[Family, bool] = {Family.SWAGGER2: True, Family.OPENAPI3: True}
        self.lenient_error: Optional[Exception] = None
        self.calls: list[Family] = []
        self.lenient_calls = 0

    def resolve_swagger2(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        return self._result(Family.SWAGGER2, "2.0", text)

    def resolve_openapi3(self, text: str, location: Optional[str] = None) -> ResolutionResult:
        return self._result(Family.OPENAPI3, "3.0.3", text)

    def parse_lenient(self, text: str, location: Optional[str] = None) -> dict[str, Any]:
        self.lenient_calls += 1
        if self.lenient_error is not None:
            raise self.lenient_error
        return parse_mapping(text)

    def _result(self, family: Family, version: str, text: str) -> ResolutionResult:
        self.calls.append(family)
        document = None
        if self.render[family]:
            document = ResolvedDocument(family, version, parse_mapping(text))
        return ResolutionResult(document, list(self.messages[family]))


@pytest.fixture
def stub_resolver() -> StubResolver:
    return StubResolver()


# ---------------------------------------------------------------------------
# Document factories
# ---------------------------------------------------------------------------


def _document(discriminator: dict[str, Any]) -> Callable[..., str]:
    def make(paths: Any = PETS_PATHS, title: Any = "Petstore", **extra: Any) -> str:
        doc: dict[str, Any] = dict(discriminator)
        info: dict[str, Any] = {"version": "1.0.0"}
        if title is not _OMIT:
            info["title"] = title
        doc["info"] = info
        if paths is not _OMIT:
            doc["paths"] = paths
        doc.update(extra)
        return json.dumps(doc)

    return make


@pytest.fixture
def omit() -> object:
    """Sentinel passed to a document factory to drop ``paths`` or ``info.title``."""
    return _OMIT


@pytest.fixture
def swagger2_doc() -> Callable[..., str]:
    """Factory for Swagger 2.0 JSON text: ``swagger2_doc(paths=..., title=...)``."""
    return _document({"swagger": "2.0"})


@pytest.fixture
def openapi3_doc() -> Callable[..., str]:
    """Factory for OpenAPI 3.0 JSON text: ``openapi3_doc(paths=..., title=...)``."""
    return _document({"openapi": "3.0.3"})


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all OASGATE_* environment variables and changes
    the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: True)

    for var in ["OASGATE_LEVEL", "OASGATE_REMOTE_REFS", "OASGATE_REMOTE_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
