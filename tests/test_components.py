"""Tests for the components module."""

import pytest

from querygen.components import ComponentRegistry, is_ref, parse_pointer
from querygen.errors import UnresolvedRef

_DOCUMENT: dict = {
    "components": {
        "schemas": {
            "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
            "Alias": {"$ref": "#/components/schemas/Pet"},
            "a/b": {"type": "string"},
            "Loop": {"$ref": "#/components/schemas/Loop"},
        },
        "parameters": {
            "limitParam": {"name": "limit", "in": "query", "schema": {"type": "integer"}},
        },
        "responses": {
            "NotFound": {"description": "not found"},
        },
    }
}


class TestParsePointer:
    def test_schema(self):
        assert parse_pointer("#/components/schemas/Pet") == ("schemas", "Pet")

    def test_request_body(self):
        assert parse_pointer("#/components/requestBodies/NewPet") == ("requestBodies", "NewPet")

    def test_escaped_name(self):
        assert parse_pointer("#/components/schemas/a~1b") == ("schemas", "a/b")
        assert parse_pointer("#/components/schemas/a~0b") == ("schemas", "a~b")

    def test_foreign_pointer(self):
        with pytest.raises(UnresolvedRef, match="only #/components/"):
            parse_pointer("#/definitions/Pet")

    def test_external_document(self):
        with pytest.raises(UnresolvedRef):
            parse_pointer("other.yaml#/components/schemas/Pet")

    def test_unknown_kind(self):
        with pytest.raises(UnresolvedRef):
            parse_pointer("#/components/headers/X-Rate-Limit")

    def test_too_deep(self):
        with pytest.raises(UnresolvedRef):
            parse_pointer("#/components/schemas/Pet/properties/name")


class TestComponentRegistry:
    def test_resolve_returns_the_same_node(self):
        registry = ComponentRegistry(_DOCUMENT)
        node = registry.resolve("#/components/schemas/Pet")
        assert node is _DOCUMENT["components"]["schemas"]["Pet"]
        assert registry.resolve("#/components/schemas/Pet") is node

    def test_resolve_escaped(self):
        registry = ComponentRegistry(_DOCUMENT)
        assert registry.resolve("#/components/schemas/a~1b") == {"type": "string"}

    def test_missing(self):
        registry = ComponentRegistry(_DOCUMENT)
        with pytest.raises(UnresolvedRef) as exc_info:
            registry.resolve("#/components/schemas/Owner")
        assert exc_info.value.pointer == "#/components/schemas/Owner"

    def test_contains(self):
        registry = ComponentRegistry(_DOCUMENT)
        assert "#/components/parameters/limitParam" in registry
        assert "#/components/parameters/offsetParam" not in registry
        assert "#/definitions/Pet" not in registry

    def test_document_without_components(self):
        registry = ComponentRegistry({"paths": {}})
        assert "#/components/schemas/Pet" not in registry

    def test_resolve_node_follows_chain(self):
        registry = ComponentRegistry(_DOCUMENT)
        node, pointer = registry.resolve_node({"$ref": "#/components/schemas/Alias"})
        assert node is _DOCUMENT["components"]["schemas"]["Pet"]
        assert pointer == "#/components/schemas/Pet"

    def test_resolve_node_plain(self):
        registry = ComponentRegistry(_DOCUMENT)
        node = {"type": "string"}
        assert registry.resolve_node(node) == (node, None)

    def test_resolve_node_cycle(self):
        registry = ComponentRegistry(_DOCUMENT)
        with pytest.raises(UnresolvedRef, match="cycle"):
            registry.resolve_node({"$ref": "#/components/schemas/Loop"})


class TestIsRef:
    def test_ref(self):
        assert is_ref({"$ref": "#/components/schemas/Pet"})

    def test_not_ref(self):
        assert not is_ref({"type": "string"})
        assert not is_ref(None)
