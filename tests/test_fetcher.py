"""Tests for the fetcher/context bootstrap."""

import logging

from querygen.codegen import template_env
from querygen.fetcher import bootstrap
from querygen.naming import output_files


class TestBootstrap:
    async def test_renders_both_when_missing(self, make_context, document, config):
        files = output_files(config)
        generated = await bootstrap(make_context(document({}), exists=False), files, template_env())

        assert [f.filename for f in generated] == ["petstoreFetcher.ts", "petstoreContext.ts"]
        fetcher, context = (f.content for f in generated)

        assert 'import { PetstoreContext } from "./petstoreContext";' in fetcher
        assert "export type PetstoreFetcherOptions<TBody, THeaders, TQueryParams, TPathParams> = {" in fetcher
        assert "export async function petstoreFetch<" in fetcher
        assert "export type ErrorWrapper<TError> =" in fetcher

        assert 'import type { QueryOperation } from "./petstoreFunctions";' in context
        assert "export type PetstoreContext<" in context
        assert "export function usePetstoreContext<" in context
        assert "export const queryKeyFn = (operation: QueryOperation) => {" in context

    async def test_unprefixed_names(self, make_context, document, config):
        files = output_files(config.model_copy(update={"filename_prefix": ""}))
        generated = await bootstrap(make_context(document({}), exists=False), files, template_env())

        assert [f.filename for f in generated] == ["fetcher.ts", "context.ts"]
        fetcher = generated[0].content
        assert "export async function fetch<" in fetcher
        assert "export type FetcherOptions<" in fetcher
        assert 'import { Context } from "./context";' in fetcher

    async def test_existing_files_are_kept(self, make_context, document, config, caplog):
        context = make_context(document({}), existing_source="export const petstoreFetch = () => {};\nexport const queryKeyFn = () => [];\n")
        with caplog.at_level(logging.WARNING, logger="querygen.fetcher"):
            generated = await bootstrap(context, output_files(config), template_env())
        assert generated == []
        assert "does not export" not in caplog.text

    async def test_missing_export_warns(self, make_context, document, config, caplog):
        context = make_context(document({}), existing_source="// hand written\n")
        with caplog.at_level(logging.WARNING, logger="querygen.fetcher"):
            generated = await bootstrap(context, output_files(config), template_env())
        assert generated == []
        assert "petstoreFetcher.ts exists but does not export 'petstoreFetch'" in caplog.text
        assert "petstoreContext.ts exists but does not export 'queryKeyFn'" in caplog.text


QUERY_KEY_FN = """\
export const queryKeyFn = (operation: QueryOperation) => {
  const queryKey: unknown[] = hasPathParams(operation)
    ? operation.path
        .split("/")
        .filter(Boolean)
        .map((i) => resolvePathParam(i, operation.variables.pathParams))
    : operation.path.split("/").filter(Boolean);

  if (hasQueryParams(operation)) {
    queryKey.push(operation.variables.queryParams);
  }

  if (hasBody(operation)) {
    queryKey.push(operation.variables.body);
  }

  return queryKey;
};
"""


class TestQueryKeyFn:
    """The generated queryKeyFn: path segments, then queryParams, then body."""

    async def _context_source(self, make_context, document, config) -> str:
        generated = await bootstrap(make_context(document({}), exists=False), output_files(config), template_env())
        return generated[1].content

    async def test_key_algorithm(self, make_context, document, config):
        source = await self._context_source(make_context, document, config)
        assert QUERY_KEY_FN in source

    async def test_query_params_before_body(self, make_context, document, config):
        source = await self._context_source(make_context, document, config)
        assert source.index("queryKey.push(operation.variables.queryParams);") < source.index(
            "queryKey.push(operation.variables.body);"
        )

    async def test_path_params_substituted(self, make_context, document, config):
        source = await self._context_source(make_context, document, config)
        assert (
            'const resolvePathParam = (key: string, pathParams: Record<string, string>) => {\n'
            '  if (key.startsWith("{") && key.endsWith("}")) {\n'
            "    return pathParams[key.slice(1, -1)];\n"
            "  }\n"
            "  return key;\n"
            "};\n"
        ) in source

    async def test_presence_guards_use_truthiness(self, make_context, document, config):
        source = await self._context_source(make_context, document, config)
        for guard, key in (
            ("hasPathParams", "pathParams"),
            ("hasQueryParams", "queryParams"),
            ("hasBody", "body"),
        ):
            assert f"const {guard} = (\n  operation: QueryOperation,\n" in source
            assert f"  return Boolean((operation.variables as any).{key});\n" in source
