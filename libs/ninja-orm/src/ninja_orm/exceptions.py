"""Domain exceptions for the ORM layer.

Errors raised by data providers are caught at the edge-handle boundary and
re-raised as one of these domain exceptions, so callers awaiting a traversal
never see raw provider errors.
"""

from __future__ import annotations


class OrmError(Exception):
    """Base exception for all ORM-layer errors.

    Attributes:
        entity_name: The entity involved, or ``None`` when no entity is known yet
            (e.g. while recording a lens path).
        operation: The operation that failed (e.g. ``"record_path"``, ``"load"``).
        detail: A sanitised description of what went wrong.
    """

    def __init__(
        self,
        *,
        operation: str,
        detail: str,
        entity_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.entity_name = entity_name
        self.operation = operation
        self.detail = detail
        if entity_name:
            msg = f"[{entity_name}] {operation} failed: {detail}"
        else:
            msg = f"{operation} failed: {detail}"
        super().__init__(msg)
        if cause is not None:
            self.__cause__ = cause


class MalformedPathError(OrmError):
    """Raised when a traversal function or path cannot be interpreted as a chain of hops."""


class EdgeResolutionError(OrmError):
    """Raised when the data provider fails to load a relation."""

    def __init__(
        self,
        *,
        operation: str,
        detail: str,
        entity_name: str | None = None,
        relation: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.relation = relation
        super().__init__(operation=operation, detail=detail, entity_name=entity_name, cause=cause)


class UnassignedIdError(OrmError):
    """Raised when reading the id of an entity that has not been flushed yet."""


class RuleViolationError(OrmError):
    """Raised by ``flush()`` when one or more entity rules fail.

    Attributes:
        errors: ``(entity, message)`` pairs, in the order the rules ran.
    """

    def __init__(self, errors: list[tuple[object, str]]) -> None:
        self.errors = errors
        detail = "; ".join(f"{entity}: {message}" for entity, message in errors)
        super().__init__(operation="flush", detail=detail)


class RelationNotLoadedError(OrmError):
    """Raised when reading ``.get`` on a relation that has not been loaded yet."""
