"""Build Jinja2 template context from extracted operations.

Synthesizes the per-operation composite types (PathParams, QueryParams,
Headers, Error, Response, RequestBody, Variables), registers them, and
assembles the dicts the functions template renders.
"""

from __future__ import annotations

import json
from typing import Any

from .components import ComponentRegistry
from .errors import UnresolvedRef
from .models import Config, OperationDescriptor, ParameterDescriptor, RoutingKind
from .naming import FUNCTIONS, OutputFiles, camel, rewrite_path
from .operations import select_success
from .registry import NamedType, TypeRegistry
from .schema_parser import (
    UNDEFINED,
    Field,
    TypeExpression,
    TypeSynthesizer,
    build_doc,
    render_object,
    union_block,
)

# Line width the generated code is laid out for (prettier's default)
PRINT_WIDTH = 80

_EMPTY_QUERY_OPERATION = (
    "export type QueryOperation = {\n"
    "  path: string;\n"
    "  operationId: never;\n"
    "  variables: unknown;\n"
    "};"
)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _parameter_fields(
    parameters: list[ParameterDescriptor],
    synth: TypeSynthesizer,
    *,
    camel_keys: bool = False,
    injected: set[str] | None = None,
) -> list[Field]:
    fields = []
    for parameter in parameters:
        optional = not parameter.required
        if injected and parameter.name.lower() in injected:
            optional = True
        description = parameter.description or parameter.schema_node.get("description")
        fields.append(Field(
            key=camel(parameter.name) if camel_keys else parameter.name,
            type=synth.synthesize(parameter.schema_node, FUNCTIONS),
            optional=optional,
            doc=build_doc(description, deprecated=parameter.deprecated, schema=parameter.schema_node),
        ))
    return fields


def _request_body_required(components: ComponentRegistry, node: dict[str, Any]) -> bool:
    resolved, _ = components.resolve_node(node)
    return bool(isinstance(resolved, dict) and resolved.get("required"))


def _operation_doc(operation: OperationDescriptor) -> str:
    return build_doc(
        operation.description or operation.summary,
        deprecated=operation.deprecated,
    )


class ContextBuilder:
    """Turns query operations into template context, sharing one registry."""

    def __init__(
        self,
        components: ComponentRegistry,
        registry: TypeRegistry,
        config: Config,
        files: OutputFiles,
    ) -> None:
        self.components = components
        self.registry = registry
        self.files = files
        self.synth = TypeSynthesizer(components, registry)
        self.injected = {header.lower() for header in config.injected_headers}
        self.fetcher_options = f'{files.context_type}["fetcherOptions"]'

    def _register(self, types: list[NamedType], name: str, expr: TypeExpression) -> str:
        types.append(self.registry.register(FUNCTIONS, name, expr.text))
        return name

    def build_operation(self, operation: OperationDescriptor) -> dict[str, Any]:
        """Synthesize every type of one query operation."""
        try:
            return self._build_operation(operation)
        except UnresolvedRef as exc:
            if exc.where is not None:
                raise
            raise UnresolvedRef(exc.pointer, where=operation.location, reason=exc.reason) from exc

    def _build_operation(self, operation: OperationDescriptor) -> dict[str, Any]:
        name = operation.name
        types: list[NamedType] = []
        variables: list[Field] = []

        path_fields = _parameter_fields(operation.path_parameters, self.synth, camel_keys=True)
        query_fields = _parameter_fields(operation.query_parameters, self.synth)
        header_fields = _parameter_fields(operation.header_parameters, self.synth, injected=self.injected)

        path_type = query_type = headers_type = None
        if path_fields:
            path_type = self._register(types, f"{name}PathParams", render_object(path_fields))
        if query_fields:
            query_type = self._register(types, f"{name}QueryParams", render_object(query_fields))
        if header_fields:
            headers_type = self._register(types, f"{name}Headers", render_object(header_fields))

        variants = self.synth.error_variants(operation.responses, FUNCTIONS)
        if not variants:
            error = TypeExpression("Fetcher.ErrorWrapper<undefined>")
        elif len(variants) == 1:
            error = TypeExpression(f"Fetcher.ErrorWrapper<{variants[0].text}>")
        else:
            error = TypeExpression(f"Fetcher.ErrorWrapper<\n{union_block(variants)}\n>")
        error_type = self._register(types, f"{name}Error", error)

        success = select_success(operation.responses)
        response = UNDEFINED if success is None else self.synth.payload(success.node, FUNCTIONS)
        response_type = self._register(types, f"{name}Response", response)

        body_type = None
        if operation.request_body is not None:
            body = self.synth.payload(operation.request_body, FUNCTIONS)
            body_type = self._register(types, f"{name}RequestBody", body)
            body_required = _request_body_required(self.components, operation.request_body)
            variables.append(Field("body", TypeExpression(body_type), not body_required))

        if headers_type:
            variables.append(Field("headers", TypeExpression(headers_type), all(f.optional for f in header_fields)))
        if path_type:
            variables.append(Field("pathParams", TypeExpression(path_type), all(f.optional for f in path_fields)))
        if query_type:
            variables.append(Field("queryParams", TypeExpression(query_type), all(f.optional for f in query_fields)))

        if variables:
            variables_expr = TypeExpression(f"{render_object(variables).text} & {self.fetcher_options}")
        else:
            variables_expr = TypeExpression(self.fetcher_options)
        variables_type = self._register(types, f"{name}Variables", variables_expr)

        generics = [
            response_type,
            error_type,
            body_type or "undefined",
            headers_type or "{}",
            query_type or "{}",
            path_type or "{}",
        ]
        url = _quote(rewrite_path(operation.http_path))
        method = _quote(operation.http_method)
        one_line_call = f"  {self.files.fetch_function}<{', '.join(generics)}>({{"
        wrap_generics = len(one_line_call) > PRINT_WIDTH
        inline_args = f"  >({{ url: {url}, method: {method}, ...variables, signal }});"
        return {
            "types": types,
            "doc": _operation_doc(operation),
            "fetch_name": f"fetch{name}",
            "query_name": f"{operation.camel_name}Query",
            "operation_id": _quote(operation.camel_name),
            "url": url,
            "method": method,
            "fetch_generics": generics,
            "wrap_generics": wrap_generics,
            "inline_args": wrap_generics and len(inline_args) <= PRINT_WIDTH,
            "response_type": response_type,
            "variables_type": variables_type,
        }

    def build(self, operations: list[OperationDescriptor]) -> dict[str, Any]:
        """Template context for the functions file."""
        queries = [op for op in operations if op.routing_kind is RoutingKind.QUERY]
        rendered = [self.build_operation(op) for op in queries]

        union_members = [
            render_object([
                Field("path", TypeExpression(op["url"])),
                Field("operationId", TypeExpression(op["operation_id"])),
                Field("variables", TypeExpression(op["variables_type"])),
            ])
            for op in rendered
        ]
        if not union_members:
            query_operation = _EMPTY_QUERY_OPERATION
        elif len(union_members) == 1:
            query_operation = f"export type QueryOperation = {union_members[0].text};"
        else:
            query_operation = f"export type QueryOperation =\n{union_block(union_members)};"

        return {
            "operations": rendered,
            "query_operation": query_operation,
            "fetch_function": self.files.fetch_function,
            "operation_count": len(rendered),
        }
