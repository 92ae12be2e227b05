"""Errors raised while generating query functions.

Structural problems (dangling references, duplicate operation ids, bad
status keys) abort the run. Schema shapes we cannot translate only warn.
"""

from __future__ import annotations


class QueryGenError(Exception):
    """Base class for fatal generation errors."""


class UnresolvedRef(QueryGenError):
    """A reference pointer has no matching component."""

    def __init__(self, pointer: str, where: str | None = None, reason: str | None = None) -> None:
        self.pointer = pointer
        self.where = where
        self.reason = reason
        message = f"Unresolved reference {pointer!r}"
        if reason:
            message += f": {reason}"
        if where:
            message += f" (in {where})"
        super().__init__(message)


class DuplicateOperationId(QueryGenError):
    """Two emitted operations normalize to the same function name."""

    def __init__(self, operation_id: str, first: str, second: str) -> None:
        self.operation_id = operation_id
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate operationId {operation_id!r}: used by {first} and {second}"
        )


class InvalidStatusPattern(QueryGenError):
    """A response key is not a status code, a class wildcard or 'default'."""

    def __init__(self, key: str, where: str | None = None) -> None:
        self.key = key
        self.where = where
        message = f"Invalid response status {key!r}"
        if where:
            message += f" (in {where})"
        super().__init__(message)


class OutputFileConflict(QueryGenError):
    """Two generated outputs resolved to the same filename."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"Output file {filename!r} would be written twice")


class UnsupportedSchemaShape(UserWarning):
    """A schema node matched no known shape and was typed as ``any``."""
