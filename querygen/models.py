"""Data models shared by the extractor, synthesizer and emitter."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import InvalidStatusPattern


class SchemasFiles(BaseModel):
    """Module names (without extension) for the component type files."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    parameters: str
    schemas: str
    responses: str
    request_bodies: str


class Config(BaseModel):
    """Generation settings.

    Accepts both snake_case and the camelCase keys used by existing
    ``openapi-codegen`` configuration files.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename_prefix: str = ""
    schemas_files: SchemasFiles
    injected_headers: list[str] = Field(default_factory=list)


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"


class RoutingKind(str, Enum):
    QUERY = "query"
    MUTATION = "mutation"
    EXCLUDED = "excluded"


class StatusKind(str, Enum):
    LITERAL = "literal"
    WILDCARD = "wildcard"
    DEFAULT = "default"


class StatusPattern(BaseModel):
    """A response-map key: a literal code, a class wildcard or ``default``."""

    model_config = ConfigDict(frozen=True)

    kind: StatusKind
    raw: str
    code: int | None = None
    status_class: int | None = None

    @property
    def is_success(self) -> bool:
        if self.kind is StatusKind.LITERAL:
            return 200 <= self.code < 300
        if self.kind is StatusKind.WILDCARD:
            return self.status_class == 2
        return False


_LITERAL_STATUS = re.compile(r"^[1-5]\d\d$")
_WILDCARD_STATUS = re.compile(r"^([1-5])[xX]{2}$")


def classify_status(key: Any, where: str | None = None) -> StatusPattern:
    """Classify a response key, raising InvalidStatusPattern if unrecognized."""
    raw = str(key).strip()
    if _LITERAL_STATUS.match(raw):
        return StatusPattern(kind=StatusKind.LITERAL, raw=raw, code=int(raw))
    match = _WILDCARD_STATUS.match(raw)
    if match:
        return StatusPattern(
            kind=StatusKind.WILDCARD, raw=raw, status_class=int(match.group(1)),
        )
    if raw == "default":
        return StatusPattern(kind=StatusKind.DEFAULT, raw=raw)
    raise InvalidStatusPattern(raw, where)


class ParameterDescriptor(BaseModel):
    """A resolved path, query or header parameter."""

    name: str
    location: ParameterLocation
    required: bool = False
    schema_node: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None
    deprecated: bool = False


class ResponseDescriptor(BaseModel):
    status: StatusPattern
    node: dict[str, Any]


class OperationDescriptor(BaseModel):
    """One (path, method) pair of the document."""

    http_path: str
    http_method: str
    operation_id: str
    name: str
    camel_name: str
    description: str | None = None
    summary: str | None = None
    deprecated: bool = False
    path_parameters: list[ParameterDescriptor] = Field(default_factory=list)
    query_parameters: list[ParameterDescriptor] = Field(default_factory=list)
    header_parameters: list[ParameterDescriptor] = Field(default_factory=list)
    request_body: dict[str, Any] | None = None
    responses: list[ResponseDescriptor] = Field(default_factory=list)
    routing_kind: RoutingKind = RoutingKind.QUERY

    @property
    def location(self) -> str:
        return f"{self.http_method.upper()} {self.http_path} ({self.operation_id})"


class GeneratedFile(BaseModel):
    filename: str
    content: str


class GenerationContext(BaseModel):
    """The input document plus the injected file-system collaborators."""

    openapi_document: dict[str, Any]
    exists_file: Callable[[str], bool]
    read_file: Callable[[str], Awaitable[str]]
    write_file: Callable[[str, str], Awaitable[None]]
