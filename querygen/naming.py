"""Turn free-form identifiers into TypeScript names.

Every generated identifier goes through split_words, so separators and
camel humps are interchangeable:

  list_pets      -> ListPets / listPets
  listPets       -> ListPets / listPets
  list-pets      -> ListPets / listPets
  getHTTPStatus  -> GetHttpStatus / getHttpStatus

Examples of derived symbols for operationId ``list_pets`` and prefix
``petstore``:

  fetchListPets, listPetsQuery, ListPetsVariables,
  petstoreFunctions.ts, PetstoreContext, petstoreFetch
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel

from .models import Config

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z]+")
_PATH_VARIABLE = re.compile(r"\{([^{}]+)\}")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

EXTENSION = ".ts"

# Output module keys
FUNCTIONS = "functions"
CONTEXT = "context"
FETCHER = "fetcher"
UTILS = "utils"
SCHEMAS = "schemas"
PARAMETERS = "parameters"
RESPONSES = "responses"
REQUEST_BODIES = "requestBodies"

# Namespace used when another file imports a component module
COMPONENT_NAMESPACES: dict[str, str] = {
    SCHEMAS: "Schemas",
    PARAMETERS: "Parameters",
    RESPONSES: "Responses",
    REQUEST_BODIES: "RequestBodies",
}


def split_words(raw: str) -> list[str]:
    """Split an identifier on separators and case boundaries."""
    words: list[str] = []
    for chunk in _SEPARATORS.split(raw):
        words.extend(_WORD.findall(chunk))
    return words


def _guard_leading_digit(name: str) -> str:
    if name[:1].isdigit():
        return f"_{name}"
    return name


def pascal(raw: str) -> str:
    """PascalCase variant, used for types and the context name."""
    name = "".join(word[:1].upper() + word[1:].lower() for word in split_words(raw))
    return _guard_leading_digit(name)


def camel(raw: str) -> str:
    """camelCase variant, used for functions and query builders."""
    words = split_words(raw)
    if not words:
        return ""
    head = words[0].lower()
    tail = "".join(word[:1].upper() + word[1:].lower() for word in words[1:])
    return _guard_leading_digit(head + tail)


def derive_operation_id(method: str, path: str) -> str:
    """Build an id from method + path for operations that lack one.

    GET /pets/{pet_id}/owners -> getPetsPetIdOwners
    """
    segments = [s.strip("{}") for s in path.split("/") if s]
    return camel(" ".join([method.lower(), *segments]))


def rewrite_path(path: str) -> str:
    """Camel-case template variables: /pets/{pet_id} -> /pets/{petId}."""
    return _PATH_VARIABLE.sub(lambda m: "{" + camel(m.group(1)) + "}", path)


def property_key(name: str) -> str:
    """Render an object key, quoting it unless it is a plain identifier."""
    if _IDENTIFIER.match(name):
        return name
    return json.dumps(name, ensure_ascii=False)


class OutputFiles(BaseModel):
    """Module names and shared symbols derived from the configuration."""

    functions: str
    context: str
    fetcher: str
    utils: str
    schemas: str
    parameters: str
    responses: str
    request_bodies: str
    context_type: str
    context_hook: str
    fetch_function: str

    def module(self, key: str) -> str:
        if key == REQUEST_BODIES:
            return self.request_bodies
        return getattr(self, key)

    def filename(self, key: str) -> str:
        return self.module(key) + EXTENSION

    def specifier(self, key: str) -> str:
        return "./" + self.module(key)


def output_files(config: Config) -> OutputFiles:
    """Derive every output module name from the configuration."""
    prefix = config.filename_prefix
    return OutputFiles(
        functions=camel(f"{prefix} functions"),
        context=camel(f"{prefix} context"),
        fetcher=camel(f"{prefix} fetcher"),
        utils=camel(f"{prefix} utils"),
        schemas=config.schemas_files.schemas,
        parameters=config.schemas_files.parameters,
        responses=config.schemas_files.responses,
        request_bodies=config.schemas_files.request_bodies,
        context_type=pascal(f"{prefix} context"),
        context_hook="use" + pascal(f"{prefix} context"),
        fetch_function=camel(f"{prefix} fetch"),
    )
