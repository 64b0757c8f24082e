"""Tests for oasgate.validation.references."""

from __future__ import annotations

from oasgate.validation.references import find_ref_values, find_remote_refs, is_remote_ref


class TestFindRefValues:
    def test_depth_first_field_order(self) -> None:
        tree = {
            "paths": {
                "/pets": {"get": {"schema": {"$ref": "#/definitions/Pet"}}},
                "/tags": {"get": {"schema": {"$ref": "./tag.yaml#/Tag"}}},
            },
            "definitions": {"Pet": {"items": [{"$ref": "#/definitions/Owner"}]}},
        }
        assert find_ref_values(tree) == [
            "#/definitions/Pet",
            "./tag.yaml#/Tag",
            "#/definitions/Owner",
        ]

    def test_non_string_ref_values_ignored(self) -> None:
        assert find_ref_values({"$ref": {"nested": True}, "a": {"$ref": 3}}) == []

    def test_scalars_and_empty(self) -> None:
        assert find_ref_values(None) == []
        assert find_ref_values("text") == []
        assert find_ref_values({}) == []

    def test_keys_named_like_ref_are_not_refs(self) -> None:
        assert find_ref_values({"ref": "#/a", "$refs": "#/b"}) == []


class TestRemoteRefs:
    def test_local_vs_remote(self) -> None:
        assert not is_remote_ref("#/definitions/Pet")
        assert not is_remote_ref("#/components/schemas/Pet")
        assert is_remote_ref("https://example.com/pet.json#/Pet")
        assert is_remote_ref("./external.yaml#/Pet")
        assert is_remote_ref("pet.yaml")

    def test_find_remote_refs_deduplicated(self) -> None:
        tree = {
            "a": {"$ref": "https://example.com/pet.json"},
            "b": {"$ref": "#/definitions/Pet"},
            "c": [{"$ref": "https://example.com/pet.json"}, {"$ref": "./tag.yaml"}],
        }
        assert find_remote_refs(tree) == ["https://example.com/pet.json", "./tag.yaml"]

    def test_all_local(self) -> None:
        assert find_remote_refs({"a": {"$ref": "#/definitions/Pet"}}) == []
