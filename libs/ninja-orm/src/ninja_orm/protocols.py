"""Protocol definitions for graph edges and data providers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ninja_orm.metadata import RelationSchema


class EdgeKind(str, Enum):
    """Whether an edge resolves to one node or to many."""

    SINGULAR = "singular"
    PLURAL = "plural"


@runtime_checkable
class Edge(Protocol):
    """A named relation handle hanging off a node.

    ``load()`` resolves to a node (or ``None``) for singular edges and to a list
    of nodes for plural edges. The walker dispatches on ``kind``, never on the
    shape of the loaded value.
    """

    kind: EdgeKind

    async def load(self) -> Any: ...


@runtime_checkable
class DataProvider(Protocol):
    """Source of related entities for relations that are not held in memory.

    The in-memory ``EntityManager`` is the default provider; a database-backed
    provider only has to implement these two coroutines.
    """

    async def load_reference(self, entity: Any, relation: RelationSchema) -> Any | None:
        """Return the single entity on the other side of ``relation``, or None."""
        ...

    async def load_collection(self, entity: Any, relation: RelationSchema) -> list[Any]:
        """Return every entity on the other side of ``relation``."""
        ...
