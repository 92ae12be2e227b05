"""Per-file import aggregation for generated TypeScript."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class _ModuleImports:
    type_namespace: str | None = None
    value_namespace: str | None = None
    type_names: set[str] = field(default_factory=set)
    value_names: set[str] = field(default_factory=set)


class ImportSet:
    """Deduplicated imports for one output file.

    Package imports render first in insertion order, then relative
    modules sorted by specifier. Within a module: type namespace, type
    names, value namespace, value names.
    """

    def __init__(self) -> None:
        self._modules: dict[str, _ModuleImports] = {}

    def _entry(self, specifier: str) -> _ModuleImports:
        return self._modules.setdefault(specifier, _ModuleImports())

    def add_namespace(self, specifier: str, alias: str, *, type_only: bool = True) -> None:
        entry = self._entry(specifier)
        if type_only:
            entry.type_namespace = alias
        else:
            entry.value_namespace = alias

    def add_named(self, specifier: str, name: str, *, type_only: bool = False) -> None:
        entry = self._entry(specifier)
        if type_only:
            entry.type_names.add(name)
        else:
            entry.value_names.add(name)

    def __bool__(self) -> bool:
        return bool(self._modules)

    def render(self) -> str:
        packages = [s for s in self._modules if not s.startswith(".")]
        relative = sorted(s for s in self._modules if s.startswith("."))
        lines: list[str] = []
        for specifier in packages + relative:
            entry = self._modules[specifier]
            if entry.type_namespace:
                lines.append(f'import type * as {entry.type_namespace} from "{specifier}";')
            if entry.type_names:
                names = ", ".join(sorted(entry.type_names))
                lines.append(f'import type {{ {names} }} from "{specifier}";')
            if entry.value_namespace:
                lines.append(f'import * as {entry.value_namespace} from "{specifier}";')
            if entry.value_names:
                names = ", ".join(sorted(entry.value_names))
                lines.append(f'import {{ {names} }} from "{specifier}";')
        return "\n".join(lines)
