"""Registry of named types shared across one generation pass.

A single TypeRegistry is created per invocation and handed to the
synthesizer, the context builder and the emitter. Names are keyed by
(module, canonical name); the first definition of a name wins.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from .imports import ImportSet
from .naming import COMPONENT_NAMESPACES, OutputFiles

logger = logging.getLogger(__name__)


class NamedType(BaseModel):
    name: str
    module: str
    shape: str | None = None
    doc: str = ""
    pointer: str | None = None
    emitted: bool = False


class TypeRegistry:
    def __init__(self, files: OutputFiles) -> None:
        self.files = files
        self._types: dict[tuple[str, str], NamedType] = {}
        self._by_pointer: dict[str, NamedType] = {}
        self._imports: dict[str, ImportSet] = {}

    def imports(self, module: str) -> ImportSet:
        return self._imports.setdefault(module, ImportSet())

    def get(self, module: str, name: str) -> NamedType | None:
        return self._types.get((module, name))

    def for_pointer(self, pointer: str) -> NamedType | None:
        return self._by_pointer.get(pointer)

    def reserve(self, module: str, name: str, pointer: str) -> tuple[NamedType, bool]:
        """Bind a component pointer to a canonical name before its shape is known.

        Returns the bound type and whether it was newly created. A name
        already held by another pointer is reused as is.
        """
        existing = self._types.get((module, name))
        if existing is not None:
            logger.warning(
                "%s normalizes to %r, already used by %s; reusing the first definition",
                pointer, name, existing.pointer,
            )
            self._by_pointer[pointer] = existing
            return existing, False
        named = NamedType(name=name, module=module, pointer=pointer)
        self._types[(module, name)] = named
        self._by_pointer[pointer] = named
        return named, True

    def register(self, module: str, name: str, shape: str, doc: str = "") -> NamedType:
        """Register a fully known type, reusing an existing one of the same name."""
        existing = self._types.get((module, name))
        if existing is not None:
            if existing.shape != shape:
                logger.warning("Type %r is already defined with a different shape; keeping the first", name)
            return existing
        named = NamedType(name=name, module=module, shape=shape, doc=doc)
        self._types[(module, name)] = named
        return named

    def types_in(self, module: str) -> list[NamedType]:
        """Types of one module, in the order they were introduced."""
        return [t for t in self._types.values() if t.module == module]

    def reference(self, named: NamedType, from_module: str) -> str:
        """Return how ``from_module`` spells ``named``, recording the import."""
        if named.module == from_module:
            return named.name
        specifier = self.files.specifier(named.module)
        namespace = COMPONENT_NAMESPACES.get(named.module)
        if namespace:
            self.imports(from_module).add_namespace(specifier, namespace)
            return f"{namespace}.{named.name}"
        self.imports(from_module).add_named(specifier, named.name, type_only=True)
        return named.name
