"""Shared fixtures for generator tests.

The write collaborator is an AsyncMock so tests can inspect the exact
sequence of (filename, content) calls, the same way the generated files
would be flushed to disk.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from querygen.components import ComponentRegistry
from querygen.models import Config, GenerationContext, SchemasFiles
from querygen.naming import output_files
from querygen.registry import TypeRegistry
from querygen.schema_parser import TypeSynthesizer

FIXTURES = Path(__file__).parent / "fixtures"

PET_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "integer", "format": "int64"},
        "name": {"type": "string"},
        "tag": {"type": "string"},
    },
}

PET_LIST_RESPONSE: dict[str, Any] = {
    "description": "pet response",
    "content": {
        "application/json": {
            "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
        },
    },
}


def build_document(paths: dict[str, Any], components: dict[str, Any] | None = None) -> dict[str, Any]:
    """Minimal petshop document; the Pet schema is always available."""
    merged: dict[str, Any] = {"schemas": {"Pet": copy.deepcopy(PET_SCHEMA)}}
    for kind, entries in (components or {}).items():
        merged.setdefault(kind, {}).update(entries)
    return {
        "openapi": "3.0.0",
        "info": {"title": "petshop", "version": "1.0.0"},
        "paths": paths,
        "components": merged,
    }


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    return Config(
        filename_prefix="petstore",
        schemas_files=SchemasFiles(
            parameters="petstoreParameters",
            schemas="petstoreSchemas",
            responses="petstoreResponses",
            request_bodies="petstoreRequestBodies",
        ),
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@pytest.fixture
def document() -> Callable[..., dict[str, Any]]:
    return build_document


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES / "petstore.yaml"


@pytest.fixture
def pet_list_response() -> dict[str, Any]:
    return copy.deepcopy(PET_LIST_RESPONSE)


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def write_file() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def make_context(write_file) -> Callable[..., GenerationContext]:
    """Build a GenerationContext; ``exists`` answers every existence check."""
    def _make(document: dict[str, Any], *, exists: bool = True, existing_source: str = "") -> GenerationContext:
        return GenerationContext(
            openapi_document=document,
            exists_file=lambda path: exists,
            read_file=AsyncMock(return_value=existing_source),
            write_file=write_file,
        )
    return _make


@pytest.fixture
def synth_for(config) -> Callable[[dict[str, Any]], TypeSynthesizer]:
    """Return a synthesizer over a document's components, with a fresh registry."""
    def _make(document: dict[str, Any]) -> TypeSynthesizer:
        return TypeSynthesizer(ComponentRegistry(document), TypeRegistry(output_files(config)))
    return _make
