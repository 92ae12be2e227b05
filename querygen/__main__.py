"""Entry point: python -m querygen SOURCE -o OUTPUT

Reads an OpenAPI document (file or URL) and writes the query functions,
component types and, when missing, the fetcher and context files.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
import httpx
import yaml

from .codegen import generate
from .errors import QueryGenError
from .files import LocalFiles
from .loader import load_config, load_spec
from .models import Config, GenerationContext, SchemasFiles
from .naming import camel


def _default_config(prefix: str) -> Config:
    return Config(
        filename_prefix=prefix,
        schemas_files=SchemasFiles(
            parameters=camel(f"{prefix} parameters"),
            schemas=camel(f"{prefix} schemas"),
            responses=camel(f"{prefix} responses"),
            request_bodies=camel(f"{prefix} request bodies"),
        ),
    )


@click.command()
@click.argument("source")
@click.option("-o", "--output", default=".", type=click.Path(file_okay=False, path_type=Path), help="Directory for generated files.")
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON or YAML configuration file.")
@click.option("--prefix", default=None, help="Filename prefix (overrides the config file).")
@click.option("--injected-header", "injected_headers", multiple=True, help="Header injected by the fetcher; may be repeated.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(
    source: str,
    output: Path,
    config_path: Path | None,
    prefix: str | None,
    injected_headers: tuple[str, ...],
    verbose: bool,
) -> None:
    """Generate react-query functions from an OpenAPI document."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(config_path) if config_path else _default_config(prefix or "")
        if prefix is not None:
            config.filename_prefix = prefix
        if injected_headers:
            config.injected_headers = list(injected_headers)

        click.echo(f"Loading {source}...")
        document = load_spec(source)

        output.mkdir(parents=True, exist_ok=True)
        files = LocalFiles(output)
        context = GenerationContext(
            openapi_document=document,
            exists_file=files.exists_file,
            read_file=files.read_file,
            write_file=files.write_file,
        )
        generated = asyncio.run(generate(context, config))
    except (QueryGenError, httpx.HTTPError, OSError, ValueError, yaml.YAMLError) as exc:
        raise click.ClickException(str(exc)) from exc

    for output_file in generated:
        click.echo(f"  Wrote {output / output_file.filename}")
    click.echo(f"Generated {len(generated)} files in {output}")


if __name__ == "__main__":
    main()
