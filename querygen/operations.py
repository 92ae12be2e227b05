"""Extract normalized operation descriptors from an OpenAPI document.

Walks paths and methods in document order, merges path-level parameters
into each operation, resolves parameter references and decides whether
the operation becomes a query wrapper.
"""

from __future__ import annotations

import logging
from typing import Any

from .components import ComponentRegistry, is_ref, parse_pointer
from .errors import DuplicateOperationId, UnresolvedRef
from .models import (
    OperationDescriptor,
    ParameterDescriptor,
    ParameterLocation,
    ResponseDescriptor,
    RoutingKind,
    StatusKind,
    classify_status,
)
from .naming import PARAMETERS, camel, derive_operation_id, pascal

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Vendor extension that overrides the generated wrapper kind
ROUTING_MARKER = "x-openapi-codegen-component"
_QUERY_MARKER = "useQuery"
_MUTATION_MARKER = "useMutate"

_LOCATIONS = {location.value: location for location in ParameterLocation}


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    return document.get("paths") or {}


def routing_kind(method: str, operation: dict[str, Any]) -> RoutingKind:
    """Classify an operation as query, mutation or excluded."""
    marker = operation.get(ROUTING_MARKER)
    if method != "get" or marker == _MUTATION_MARKER:
        return RoutingKind.MUTATION
    if marker is not None and marker != _QUERY_MARKER:
        return RoutingKind.EXCLUDED
    return RoutingKind.QUERY


def _resolve_parameter(components: ComponentRegistry, raw: Any) -> dict[str, Any]:
    if is_ref(raw):
        kind, _ = parse_pointer(raw["$ref"])
        if kind != PARAMETERS:
            raise UnresolvedRef(raw["$ref"], reason="parameter reference must target #/components/parameters")
        raw, _ = components.resolve_node(raw)
    return raw


def _parameter_schema(parameter: dict[str, Any]) -> dict[str, Any]:
    if "schema" in parameter:
        return parameter["schema"] or {}
    for media in (parameter.get("content") or {}).values():
        return media.get("schema") or {}
    return {}


def merge_parameters(
    components: ComponentRegistry,
    path_level: list[Any],
    operation_level: list[Any],
) -> list[dict[str, Any]]:
    """Merge parameter lists; operation-level entries win on equal (in, name)."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*path_level, *operation_level]:
        parameter = _resolve_parameter(components, raw)
        if not isinstance(parameter, dict) or "name" not in parameter or "in" not in parameter:
            logger.warning("Skipping malformed parameter %r", raw)
            continue
        merged[(parameter["in"], str(parameter["name"]))] = parameter
    return list(merged.values())


def _to_descriptor(parameter: dict[str, Any]) -> ParameterDescriptor | None:
    location = _LOCATIONS.get(parameter["in"])
    if location is None:
        logger.debug("Skipping %s parameter %r", parameter["in"], parameter["name"])
        return None
    return ParameterDescriptor(
        name=str(parameter["name"]),
        location=location,
        required=bool(parameter.get("required", location is ParameterLocation.PATH)),
        schema_node=_parameter_schema(parameter),
        description=parameter.get("description"),
        deprecated=bool(parameter.get("deprecated", False)),
    )


def _build_operation(
    components: ComponentRegistry,
    path: str,
    method: str,
    path_item: dict[str, Any],
    operation: dict[str, Any],
) -> OperationDescriptor:
    operation_id = str(operation.get("operationId") or "")
    if not operation_id:
        operation_id = derive_operation_id(method, path)
        logger.debug("%s %s has no operationId, using %r", method.upper(), path, operation_id)
    where = f"{method.upper()} {path} ({operation_id})"

    try:
        parameters = merge_parameters(
            components,
            path_item.get("parameters") or [],
            operation.get("parameters") or [],
        )
    except UnresolvedRef as exc:
        raise UnresolvedRef(exc.pointer, where=where, reason=exc.reason) from exc

    by_location: dict[ParameterLocation, list[ParameterDescriptor]] = {loc: [] for loc in ParameterLocation}
    for parameter in parameters:
        descriptor = _to_descriptor(parameter)
        if descriptor is not None:
            by_location[descriptor.location].append(descriptor)

    responses = [
        ResponseDescriptor(status=classify_status(key, where), node=node or {})
        for key, node in (operation.get("responses") or {}).items()
    ]

    return OperationDescriptor(
        http_path=path,
        http_method=method,
        operation_id=operation_id,
        name=pascal(operation_id),
        camel_name=camel(operation_id),
        description=operation.get("description"),
        summary=operation.get("summary"),
        deprecated=bool(operation.get("deprecated", False)),
        path_parameters=by_location[ParameterLocation.PATH],
        query_parameters=by_location[ParameterLocation.QUERY],
        header_parameters=by_location[ParameterLocation.HEADER],
        request_body=operation.get("requestBody"),
        responses=responses,
        routing_kind=routing_kind(method, operation),
    )


def extract_operations(
    document: dict[str, Any],
    components: ComponentRegistry,
) -> list[OperationDescriptor]:
    """Build one descriptor per (path, method), in document order."""
    operations: list[OperationDescriptor] = []
    seen: dict[str, OperationDescriptor] = {}

    for path, path_item in get_paths(document).items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            descriptor = _build_operation(components, path, method, path_item, operation)

            if descriptor.routing_kind is not RoutingKind.EXCLUDED:
                key = descriptor.camel_name
                if key in seen:
                    raise DuplicateOperationId(
                        descriptor.operation_id, seen[key].location, descriptor.location,
                    )
                seen[key] = descriptor
            operations.append(descriptor)

    return operations


def select_success(responses: list[ResponseDescriptor]) -> ResponseDescriptor | None:
    """Lowest literal 2xx response, falling back to a 2XX wildcard."""
    literals = sorted(
        (r for r in responses if r.status.kind is StatusKind.LITERAL and r.status.is_success),
        key=lambda r: r.status.code,
    )
    if literals:
        return literals[0]
    for response in responses:
        if response.status.is_success:
            return response
    return None


def error_responses(responses: list[ResponseDescriptor]) -> list[ResponseDescriptor]:
    """Every non-success response, in declaration order."""
    return [r for r in responses if not r.status.is_success]
