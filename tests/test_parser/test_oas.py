"""Tests for oasgate.parser.oas -- the default resolver and its error wording."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from jsonschema import Draft4Validator
from referencing.exceptions import Unresolvable

from oasgate.exceptions import DocumentParseError, RemoteReferenceError
from oasgate.models import Family
from oasgate.parser.oas import (
    OPENAPI_MISSING_MESSAGE,
    SWAGGER_MISSING_MESSAGE,
    ResolvedDocument,
    SpecResolver,
    describe_error,
)
from oasgate.parser.resolver import REMOTE_REFERENCE_FAILURE, RemoteLoader

MINIMAL_SWAGGER = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {"/pets": {"get": {"responses": {"200": {"description": "ok"}}}}},
}


@pytest.fixture
def offline_resolver() -> SpecResolver:
    return SpecResolver(RemoteLoader(enabled=False))


def _first_error(schema: dict, instance: object) -> list[str]:
    error = next(Draft4Validator(schema).iter_errors(instance))
    return list(describe_error(error))


# ---------------------------------------------------------------------------
# Family discriminator and version
# ---------------------------------------------------------------------------


class TestDiscriminator:
    def test_swagger_missing(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_swagger2('{"openapi": "3.0.0"}')
        assert result.document is None
        assert result.messages == [SWAGGER_MISSING_MESSAGE]

    def test_openapi_missing(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_openapi3(json.dumps(MINIMAL_SWAGGER))
        assert result.document is None
        assert result.messages == [OPENAPI_MISSING_MESSAGE]

    def test_wrong_swagger_version(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_swagger2('swagger: "1.2"\n')
        assert result.document is None
        assert result.messages == ["attribute swagger is not of value `2.0` (found `1.2`)"]

    def test_wrong_openapi_version(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_openapi3('openapi: "2.5"\n')
        assert result.document is None
        assert "attribute openapi is not of value `3.x`" in result.messages[0]

    def test_unparsable_text(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_openapi3('{"openapi": ')
        assert result.document is None
        assert result.messages[0].startswith("Unable to parse document content: Invalid JSON")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolve:
    def test_minimal_swagger_is_clean(self, offline_resolver: SpecResolver) -> None:
        result = offline_resolver.resolve_swagger2(json.dumps(MINIMAL_SWAGGER))
        assert isinstance(result.document, ResolvedDocument)
        assert result.document.family == Family.SWAGGER2
        assert result.document.version == "2.0"
        assert result.messages == []

    def test_missing_info_reported(self, offline_resolver: SpecResolver) -> None:
        doc = {key: value for key, value in MINIMAL_SWAGGER.items() if key != "info"}
        result = offline_resolver.resolve_swagger2(json.dumps(doc))
        assert result.document is not None
        assert "attribute info is missing" in result.messages

    def test_remote_ref_failure_reported_with_document(
        self, offline_resolver: SpecResolver
    ) -> None:
        doc = dict(MINIMAL_SWAGGER)
        doc["definitions"] = {"Pet": {"$ref": "https://example.com/pet.json#/Pet"}}
        result = offline_resolver.resolve_swagger2(json.dumps(doc))
        assert result.document is not None
        assert result.document.tree["definitions"]["Pet"] == {}
        assert any(m.startswith(REMOTE_REFERENCE_FAILURE) for m in result.messages)

    def test_unresolvable_schema_reported(self, offline_resolver: SpecResolver) -> None:
        validator = MagicMock()
        validator.iter_errors.side_effect = Unresolvable(ref="#/definitions/Gone")
        with patch("oasgate.parser.oas._validator_for", return_value=validator):
            result = offline_resolver.resolve_swagger2(json.dumps(MINIMAL_SWAGGER))
        assert result.document is not None
        assert len(result.messages) == 1
        assert result.messages[0].startswith("Unable to validate the definition: ")

    def test_validator_bugs_propagate(self, offline_resolver: SpecResolver) -> None:
        validator = MagicMock()
        validator.iter_errors.side_effect = TypeError("unexpected")
        with patch("oasgate.parser.oas._validator_for", return_value=validator):
            with pytest.raises(TypeError):
                offline_resolver.resolve_swagger2(json.dumps(MINIMAL_SWAGGER))

    def test_paths_accessor(self) -> None:
        document = ResolvedDocument(Family.OPENAPI3, "3.0.3", {"paths": []})
        assert document.paths is None


class TestParseLenient:
    def test_returns_dereferenced_tree(self, offline_resolver: SpecResolver) -> None:
        doc = dict(MINIMAL_SWAGGER)
        doc["definitions"] = {"Pet": {"type": "object"}, "Alias": {"$ref": "#/definitions/Pet"}}
        tree = offline_resolver.parse_lenient(json.dumps(doc))
        assert tree["definitions"]["Alias"] == {"type": "object"}

    def test_remote_failure_raises(self, offline_resolver: SpecResolver) -> None:
        text = json.dumps({"swagger": "2.0", "x": {"$ref": "https://example.com/a.json"}})
        with pytest.raises(RemoteReferenceError):
            offline_resolver.parse_lenient(text)

    def test_unparsable_raises(self, offline_resolver: SpecResolver) -> None:
        with pytest.raises(DocumentParseError):
            offline_resolver.parse_lenient("- just\n- a list\n")


# ---------------------------------------------------------------------------
# describe_error
# ---------------------------------------------------------------------------


class TestDescribeError:
    def test_required(self) -> None:
        schema = {"properties": {"info": {"required": ["title"]}}}
        assert _first_error(schema, {"info": {}}) == ["attribute info.title is missing"]

    def test_required_at_root(self) -> None:
        assert _first_error({"required": ["paths"]}, {}) == ["attribute paths is missing"]

    def test_additional_properties(self) -> None:
        schema = {"properties": {"a": {}}, "additionalProperties": False}
        assert _first_error(schema, {"a": 1, "b": 2}) == ["attribute b is unexpected"]

    def test_object_type_is_malformed(self) -> None:
        schema = {"properties": {"paths": {"type": "object"}}}
        assert _first_error(schema, {"paths": []}) == [
            "attribute paths is malformed, expected type `object`"
        ]

    def test_root_object_type(self) -> None:
        assert _first_error({"type": "object"}, []) == [
            "attribute document is malformed, expected type `object`"
        ]

    def test_other_type(self) -> None:
        schema = {"properties": {"info": {"properties": {"title": {"type": "string"}}}}}
        assert _first_error(schema, {"info": {"title": 3}}) == [
            "attribute info.title is not of type `string`"
        ]

    def test_fallback_keeps_location(self) -> None:
        schema = {"properties": {"n": {"minimum": 5}}}
        (message,) = _first_error(schema, {"n": 1})
        assert message.startswith("n: ")
