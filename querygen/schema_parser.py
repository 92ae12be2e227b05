"""Translate OpenAPI schemas into TypeScript type expressions.

Handles:
- $ref to schemas / responses / requestBodies components (named types)
- Self- and mutually-recursive references
- allOf / oneOf / anyOf composition
- enum and const literal unions (declaration order is kept)
- nullable and OpenAPI 3.1 type arrays
- Arrays, objects and additionalProperties
- Status-range helper types for wildcard and default responses
"""

from __future__ import annotations

import json
import logging
import warnings
from typing import Any, NamedTuple

from .components import ComponentRegistry, is_ref, parse_pointer
from .errors import UnresolvedRef, UnsupportedSchemaShape
from .models import ResponseDescriptor, StatusKind, StatusPattern
from .naming import PARAMETERS, UTILS, pascal, property_key
from .operations import error_responses
from .registry import NamedType, TypeRegistry

logger = logging.getLogger(__name__)

ATOM = "atom"
UNION = "union"
INTERSECTION = "intersection"


class TypeExpression(NamedTuple):
    text: str
    kind: str = ATOM


class Field(NamedTuple):
    """One member of a rendered object type."""

    key: str
    type: TypeExpression
    optional: bool = False
    doc: str = ""


ANY = TypeExpression("any")
NEVER = TypeExpression("never")
NULL = TypeExpression("null")
UNDEFINED = TypeExpression("undefined")

_PRIMITIVES: dict[str, str] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
}

# status class -> (type name, lower bound, upper bound)
_STATUS_RANGES: dict[int, tuple[str, int, int]] = {
    1: ("InformationalStatus", 100, 200),
    2: ("SuccessStatus", 200, 300),
    3: ("RedirectionStatus", 300, 400),
    4: ("ClientErrorStatus", 400, 500),
    5: ("ServerErrorStatus", 500, 600),
}
DEFAULT_STATUS = "ErrorStatus"


def _indent(text: str, prefix: str = "  ") -> str:
    """Indent every line but the first."""
    lines = text.split("\n")
    return "\n".join([lines[0]] + [prefix + line if line else line for line in lines[1:]])


def literal(value: Any) -> str:
    """Render an enum/const value as a TypeScript literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(str(value), ensure_ascii=False)


def build_doc(
    description: str | None = None,
    *,
    deprecated: bool = False,
    schema: dict[str, Any] | None = None,
) -> str:
    """Build a JSDoc block (with trailing newline), or '' if there is nothing to say."""
    lines: list[str] = []
    if description and description.strip():
        lines.extend(description.strip().splitlines())
    if schema:
        if "format" in schema:
            lines.append(f"@format {schema['format']}")
        if "default" in schema:
            lines.append(f"@default {json.dumps(schema['default'], ensure_ascii=False, default=str)}")
    if deprecated:
        lines.append("@deprecated")
    if not lines:
        return ""
    body = [" *" + (" " + line.rstrip().replace("*/", "*\\/") if line.strip() else "") for line in lines]
    return "/**\n" + "\n".join(body) + "\n */\n"


def union(members: list[TypeExpression]) -> TypeExpression:
    """Join members with '|', dropping duplicates but keeping order."""
    seen: list[TypeExpression] = []
    for member in members:
        if member.text not in (m.text for m in seen):
            seen.append(member)
    if not seen:
        return NEVER
    if len(seen) == 1:
        return seen[0]
    return TypeExpression(" | ".join(m.text for m in seen), UNION)


def intersection(members: list[TypeExpression]) -> TypeExpression:
    if not members:
        return ANY
    if len(members) == 1:
        return members[0]
    parts = [f"({m.text})" if m.kind == UNION else m.text for m in members]
    return TypeExpression(" & ".join(parts), INTERSECTION)


def render_object(fields: list[Field]) -> TypeExpression:
    """Render an object type literal, one member per line."""
    if not fields:
        return TypeExpression("{}")
    lines = ["{"]
    for field in fields:
        if field.doc:
            lines.extend("  " + line for line in field.doc.rstrip("\n").split("\n"))
        marker = "?" if field.optional else ""
        lines.append(f"  {property_key(field.key)}{marker}: {_indent(field.type.text)};")
    lines.append("}")
    return TypeExpression("\n".join(lines))


def union_block(variants: list[TypeExpression]) -> str:
    """Render variants as leading-pipe lines, one variant per block."""
    return "\n".join("  | " + _indent(v.text, "    ") for v in variants)


def _pick_media(content: dict[str, Any]) -> dict[str, Any] | None:
    if not content:
        return None
    if "application/json" in content:
        return content["application/json"]
    for media_type, media in content.items():
        if "json" in media_type:
            return media
    return next(iter(content.values()))


class TypeSynthesizer:
    """Synthesize type expressions, registering named types as it goes."""

    def __init__(self, components: ComponentRegistry, registry: TypeRegistry) -> None:
        self.components = components
        self.registry = registry

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def synthesize(self, schema: Any, module: str) -> TypeExpression:
        """Translate a schema node into a type expression usable in ``module``."""
        if schema is None or schema is True:
            return ANY
        if schema is False:
            return NEVER
        if not isinstance(schema, dict):
            self._unsupported(f"schema of type {type(schema).__name__}")
            return ANY
        if "$ref" in schema:
            return self._ref(schema["$ref"], module)

        expr = self._shape(schema, module)
        if schema.get("nullable") and expr.text != "any":
            expr = union([expr, NULL])
        return expr

    def _shape(self, schema: dict[str, Any], module: str) -> TypeExpression:
        if "allOf" in schema:
            members = [self.synthesize(sub, module) for sub in schema["allOf"]]
            rest = {k: v for k, v in schema.items() if k != "allOf"}
            if "properties" in rest or "additionalProperties" in rest:
                members.append(self._object(rest, module))
            return intersection(members)

        for key in ("oneOf", "anyOf"):
            if key in schema:
                return union([self.synthesize(sub, module) for sub in schema[key]])

        if "enum" in schema:
            return union([TypeExpression(literal(value)) for value in schema["enum"] or []])
        if "const" in schema:
            return TypeExpression(literal(schema["const"]))

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            return union([self._typed(schema, t, module) for t in schema_type])
        if schema_type is None:
            if "properties" in schema or "additionalProperties" in schema:
                return self._object(schema, module)
            if "items" in schema:
                return self._array(schema, module)
            if "not" in schema:
                self._unsupported("'not' schema")
            return ANY
        return self._typed(schema, schema_type, module)

    def _typed(self, schema: dict[str, Any], schema_type: Any, module: str) -> TypeExpression:
        if schema_type == "object":
            return self._object(schema, module)
        if schema_type == "array":
            return self._array(schema, module)
        if schema_type == "string" and schema.get("format") == "binary":
            return TypeExpression("Blob")
        if schema_type in _PRIMITIVES:
            return TypeExpression(_PRIMITIVES[schema_type])
        self._unsupported(f"unknown type {schema_type!r}")
        return ANY

    def _array(self, schema: dict[str, Any], module: str) -> TypeExpression:
        if "items" not in schema:
            return TypeExpression("unknown[]")
        item = self.synthesize(schema["items"], module)
        if item.kind != ATOM:
            return TypeExpression(f"({item.text})[]")
        return TypeExpression(f"{item.text}[]")

    def _object(self, schema: dict[str, Any], module: str) -> TypeExpression:
        properties = schema.get("properties") or {}
        required = {str(name) for name in schema.get("required") or []}
        additional = schema.get("additionalProperties")

        parts: list[TypeExpression] = []
        if properties:
            fields = [
                Field(
                    key=str(name),
                    type=self.synthesize(prop, module),
                    optional=str(name) not in required,
                    doc=self._property_doc(prop),
                )
                for name, prop in properties.items()
            ]
            parts.append(render_object(fields))
        if additional is not None and additional is not False:
            value = ANY if additional is True or additional == {} else self.synthesize(additional, module)
            parts.append(TypeExpression(f"Record<string, {value.text}>"))
        if not parts:
            return TypeExpression("Record<string, any>")
        return intersection(parts)

    @staticmethod
    def _property_doc(prop: Any) -> str:
        if not isinstance(prop, dict):
            return ""
        return build_doc(prop.get("description"), deprecated=bool(prop.get("deprecated")), schema=prop)

    def _unsupported(self, reason: str) -> None:
        logger.debug("Unsupported schema shape: %s", reason)
        warnings.warn(f"{reason}; typed as 'any'", UnsupportedSchemaShape, stacklevel=3)

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _ref(self, pointer: str, module: str) -> TypeExpression:
        kind, name = parse_pointer(pointer)
        if kind == PARAMETERS:
            raise UnresolvedRef(pointer, reason="a parameter cannot be used as a type")

        named = self.registry.for_pointer(pointer)
        if named is None:
            target = self.components.resolve(pointer)
            named, created = self.registry.reserve(kind, pascal(name), pointer)
            if created:
                self._define_component(named, kind, target)
        return TypeExpression(self.registry.reference(named, module))

    def _define_component(self, named: NamedType, kind: str, target: Any) -> None:
        # The name is already bound, so a reference back to it stops here.
        if kind == "schemas":
            expr = self.synthesize(target, kind)
            if isinstance(target, dict):
                named.doc = build_doc(
                    target.get("description"),
                    deprecated=bool(target.get("deprecated")),
                    schema=target,
                )
        else:
            expr = self.payload(target, kind)
            if isinstance(target, dict):
                named.doc = build_doc(target.get("description"))
        named.shape = expr.text

    # ------------------------------------------------------------------
    # Responses and request bodies
    # ------------------------------------------------------------------

    def payload(self, node: Any, module: str) -> TypeExpression:
        """Type of a response or request body's JSON content."""
        if is_ref(node):
            return self._ref(node["$ref"], module)
        if not isinstance(node, dict):
            return UNDEFINED
        media = _pick_media(node.get("content") or {})
        if media is None:
            return UNDEFINED
        if "schema" not in media:
            return ANY
        return self.synthesize(media["schema"], module)

    def status_type(self, status: StatusPattern, module: str) -> TypeExpression:
        """Literal status code, or a reference to a status-range helper type."""
        if status.kind is StatusKind.LITERAL:
            return TypeExpression(str(status.code))
        if status.kind is StatusKind.WILDCARD:
            named = self._range_type(status.status_class)
        else:
            client = self._range_type(4)
            server = self._range_type(5)
            named = self.registry.register(UTILS, DEFAULT_STATUS, f"{client.name} | {server.name}")
        return TypeExpression(self.registry.reference(named, module))

    def _range_type(self, status_class: int) -> NamedType:
        name, low, high = _STATUS_RANGES[status_class]
        shape = f"Exclude<ComputeRange<{high}>[number], ComputeRange<{low}>[number]>"
        return self.registry.register(UTILS, name, shape)

    def error_variants(self, responses: list[ResponseDescriptor], module: str) -> list[TypeExpression]:
        """One ``{status, payload}`` object per non-success response."""
        variants: list[TypeExpression] = []
        for response in error_responses(responses):
            variant = render_object([
                Field("status", self.status_type(response.status, module)),
                Field("payload", self.payload(response.node, module)),
            ])
            if variant.text not in (v.text for v in variants):
                variants.append(variant)
        return variants
