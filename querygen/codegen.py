"""Render templates and write generated output.

Runs one full generation pass: extract operations, synthesize types,
render every file in memory, then hand the files to the write
collaborator one at a time.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import jinja2

from .components import ComponentRegistry
from .context_builder import ContextBuilder
from .errors import OutputFileConflict
from .fetcher import bootstrap
from .models import Config, GeneratedFile, GenerationContext
from .naming import (
    CONTEXT,
    FETCHER,
    FUNCTIONS,
    REQUEST_BODIES,
    RESPONSES,
    SCHEMAS,
    UTILS,
    OutputFiles,
    output_files,
)
from .operations import extract_operations
from .registry import TypeRegistry

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

_COMPONENT_MODULES = (SCHEMAS, RESPONSES, REQUEST_BODIES)


def template_env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _render_types(
    env: jinja2.Environment,
    template: str,
    registry: TypeRegistry,
    module: str,
    version: str,
) -> str:
    types = registry.types_in(module)
    content = env.get_template(template).render(
        version=version,
        imports=registry.imports(module).render(),
        types=types,
    )
    for named in types:
        named.emitted = True
    return content


def _render_functions(
    env: jinja2.Environment,
    registry: TypeRegistry,
    files: OutputFiles,
    context: dict[str, Any],
    version: str,
) -> str:
    imports = registry.imports(FUNCTIONS)
    imports.add_namespace("@tanstack/react-query", "reactQuery", type_only=False)
    imports.add_named(files.specifier(CONTEXT), files.context_type)
    imports.add_named(files.specifier(CONTEXT), "queryKeyFn")
    imports.add_namespace(files.specifier(FETCHER), "Fetcher")
    imports.add_named(files.specifier(FETCHER), files.fetch_function)

    content = env.get_template("functions.ts.j2").render(
        version=version,
        imports=imports.render(),
        **context,
    )
    for operation in context["operations"]:
        for named in operation["types"]:
            named.emitted = True
    return content


async def generate(context: GenerationContext, config: Config) -> list[GeneratedFile]:
    """Generate every output file and write them in order.

    Nothing is written until all contents are assembled, so a fatal
    error leaves the output directory untouched.
    """
    document = context.openapi_document
    version = str((document.get("info") or {}).get("version", "unknown"))
    files = output_files(config)
    env = template_env()

    components = ComponentRegistry(document)
    registry = TypeRegistry(files)
    operations = extract_operations(document, components)
    functions_context = ContextBuilder(components, registry, config, files).build(operations)

    generated = await bootstrap(context, files, env)

    if registry.types_in(UTILS):
        utils = _render_types(env, "utils.ts.j2", registry, UTILS, version)
        generated.append(GeneratedFile(filename=files.filename(UTILS), content=utils))
    functions = _render_functions(env, registry, files, functions_context, version)
    generated.append(GeneratedFile(filename=files.filename(FUNCTIONS), content=functions))

    for module in _COMPONENT_MODULES:
        if registry.types_in(module):
            content = _render_types(env, "components.ts.j2", registry, module, version)
            generated.append(GeneratedFile(filename=files.filename(module), content=content))

    seen: set[str] = set()
    for output in generated:
        if output.filename in seen:
            raise OutputFileConflict(output.filename)
        seen.add(output.filename)

    for output in generated:
        await context.write_file(output.filename, output.content)

    logger.info(
        "Generated %s (%d operations, %d files)",
        files.filename(FUNCTIONS), functions_context["operation_count"], len(generated),
    )
    return generated
