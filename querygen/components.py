"""Resolve ``#/components/...`` reference pointers.

Only the four reusable collections are addressable: schemas, parameters,
responses and requestBodies. Resolution is a direct lookup; references
nested inside the target are left for the caller to follow.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from .errors import UnresolvedRef

COMPONENT_KINDS = ("schemas", "parameters", "responses", "requestBodies")

_PREFIX = "#/components/"


def parse_pointer(pointer: str) -> tuple[str, str]:
    """Split a pointer into (kind, component name)."""
    if not isinstance(pointer, str) or not pointer.startswith(_PREFIX):
        raise UnresolvedRef(str(pointer), reason="only #/components/ pointers are supported")
    parts = pointer[len(_PREFIX):].split("/")
    if len(parts) != 2 or parts[0] not in COMPONENT_KINDS or not parts[1]:
        raise UnresolvedRef(pointer, reason="not a schemas/parameters/responses/requestBodies entry")
    name = unquote(parts[1]).replace("~1", "/").replace("~0", "~")
    return parts[0], name


def is_ref(node: Any) -> bool:
    return isinstance(node, dict) and "$ref" in node


class ComponentRegistry:
    """Pointer lookup over a document's component section."""

    def __init__(self, document: dict[str, Any]) -> None:
        components = document.get("components") or {}
        self._nodes: dict[tuple[str, str], Any] = {}
        for kind in COMPONENT_KINDS:
            for name, node in (components.get(kind) or {}).items():
                self._nodes[(kind, str(name))] = node

    def __contains__(self, pointer: str) -> bool:
        try:
            return parse_pointer(pointer) in self._nodes
        except UnresolvedRef:
            return False

    def resolve(self, pointer: str) -> Any:
        """Return the node a pointer targets."""
        key = parse_pointer(pointer)
        try:
            return self._nodes[key]
        except KeyError:
            raise UnresolvedRef(pointer) from None

    def resolve_node(self, node: Any) -> tuple[Any, str | None]:
        """Follow a chain of ``$ref`` nodes to the first concrete node.

        Returns the node and the last pointer followed (None when the node
        was not a reference).
        """
        pointer = None
        seen: set[str] = set()
        while is_ref(node):
            pointer = node["$ref"]
            if pointer in seen:
                raise UnresolvedRef(pointer, reason="reference cycle without content")
            seen.add(pointer)
            node = self.resolve(pointer)
        return node, pointer
