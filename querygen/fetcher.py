"""Write the default fetcher and context sources when they are missing.

Both files are meant to be customized by hand, so an existing file is
never overwritten or patched.
"""

from __future__ import annotations

import logging
import re

import jinja2

from .models import GeneratedFile, GenerationContext
from .naming import CONTEXT, FETCHER, FUNCTIONS, OutputFiles, pascal

logger = logging.getLogger(__name__)


def _template_vars(files: OutputFiles) -> dict[str, str]:
    return {
        "context_type": files.context_type,
        "context_hook": files.context_hook,
        "context_module": files.specifier(CONTEXT),
        "fetch_function": files.fetch_function,
        "fetcher_options": pascal(files.fetcher + " options"),
        "functions_module": files.specifier(FUNCTIONS),
    }


async def _check_export(context: GenerationContext, filename: str, symbol: str) -> None:
    source = await context.read_file(filename)
    if not re.search(rf"\bexport\b[^\n]*\b{re.escape(symbol)}\b", source):
        logger.warning("%s exists but does not export %r; generated code imports it", filename, symbol)


async def bootstrap(
    context: GenerationContext,
    files: OutputFiles,
    env: jinja2.Environment,
) -> list[GeneratedFile]:
    """Render the fetcher/context templates for files that do not exist yet."""
    generated: list[GeneratedFile] = []
    variables = _template_vars(files)

    for key, template, symbol in (
        (FETCHER, "fetcher.ts.j2", files.fetch_function),
        (CONTEXT, "context.ts.j2", "queryKeyFn"),
    ):
        filename = files.filename(key)
        if context.exists_file(filename):
            logger.debug("%s already exists, leaving it untouched", filename)
            await _check_export(context, filename, symbol)
            continue
        content = env.get_template(template).render(**variables)
        generated.append(GeneratedFile(filename=filename, content=content))

    return generated
