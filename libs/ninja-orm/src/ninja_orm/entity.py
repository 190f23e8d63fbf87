"""The base class for all entities."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from ninja_orm.exceptions import MalformedPathError, UnassignedIdError
from ninja_orm.lens import PathLike, record_path
from ninja_orm.metadata import EntityMetadata, register_entity, validate_path
from ninja_orm.protocols import EdgeKind
from ninja_orm.relations import Collection, Reference
from ninja_orm.rules import EntityConfig
from ninja_orm.walker import walk

if TYPE_CHECKING:
    from ninja_orm.manager import EntityManager, Hint


class BaseEntity:
    """The base class for all entities.

    Subclasses declare ``metadata``; every non-computed relation becomes a
    ``Reference`` or ``Collection`` attribute and every field a tracked attribute::

        class Book(BaseEntity):
            metadata = EntityMetadata(
                name="Book",
                fields=["title"],
                relations=[RelationSchema(name="author", target_entity="Author", cardinality="many_to_one",
                                          inverse="books")],
            )

        publisher = await book.load(lambda b: b.author.publisher)
    """

    metadata: ClassVar[EntityMetadata]
    config: ClassVar[EntityConfig]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "metadata" in cls.__dict__:
            if "config" not in cls.__dict__:
                cls.config = EntityConfig()
            register_entity(cls)

    def __init__(self, em: EntityManager, **opts: Any) -> None:
        object.__setattr__(self, "em", em)
        object.__setattr__(self, "data", {"id": None})
        object.__setattr__(self, "original_data", {})
        object.__setattr__(self, "_deleted", None)
        for rel in self.metadata.relations:
            if rel.computed:
                continue
            handle = Reference(self, rel) if rel.kind is EdgeKind.SINGULAR else Collection(self, rel)
            object.__setattr__(self, rel.name, handle)
        em.register(self)
        for name, value in opts.items():
            rel = self.metadata.relation(name)
            if rel is not None and rel.kind is EdgeKind.PLURAL and not rel.computed:
                for other in value:
                    getattr(self, name).add(other)
            else:
                self.set(**{name: value})
        self.original_data.clear()

    # -- field access ------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if name in type(self).metadata.fields:
            return self.data.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.metadata.fields:
            old = self.data.get(name)
            self._track(name, old, value)
            self.data[name] = value
            return
        rel = self.metadata.relation(name)
        if rel is not None and not rel.computed:
            raise AttributeError(f"Relation {name!r} cannot be reassigned; use {name}.set() or {name}.add()")
        object.__setattr__(self, name, value)

    def _track(self, name: str, old: Any, new: Any) -> None:
        """Remember the pre-change value of ``name``; forget it once changed back."""
        if name not in self.original_data:
            if old is not new and old != new:
                self.original_data[name] = old
        elif self.original_data[name] is new or self.original_data[name] == new:
            del self.original_data[name]

    def _handles(self) -> Iterator[Reference | Collection]:
        for rel in self.metadata.relations:
            if not rel.computed:
                yield getattr(self, rel.name)

    def set(self, **values: Any) -> None:
        """Set several fields and references at once."""
        for name, value in values.items():
            if name in self.metadata.fields:
                setattr(self, name, value)
                continue
            rel = self.metadata.relation(name)
            if rel is None or rel.computed or rel.kind is EdgeKind.PLURAL:
                raise AttributeError(f"{name!r} is not a field or reference of {self.metadata.name}")
            getattr(self, name).set(value)

    # -- identity and state ------------------------------------------------

    @property
    def id(self) -> str | None:
        return self.data["id"]

    @property
    def id_or_fail(self) -> str:
        """The current id, or UnassignedIdError if the entity has not been flushed yet."""
        if self.data["id"] is None:
            raise UnassignedIdError(entity_name=self.metadata.name, operation="id", detail="Entity has no id yet")
        return self.data["id"]

    @property
    def is_new_entity(self) -> bool:
        return self.id is None

    @property
    def is_deleted_entity(self) -> bool:
        return self._deleted is not None

    @property
    def is_dirty_entity(self) -> bool:
        return len(self.original_data) > 0

    @property
    def is_pending_delete(self) -> bool:
        return self._deleted == "pending"

    @property
    def is_pending_flush(self) -> bool:
        return self.is_new_entity or self.is_dirty_entity or self.is_pending_delete

    def __str__(self) -> str:
        return f"{self.metadata.name}#{self.id or 'new'}"

    def __repr__(self) -> str:
        return f"<{self}>"

    def to_json(self) -> dict[str, Any]:
        """A shallow, JSON-friendly dict of fields and owned references.

        Related entities are rendered as their ``str()`` so that logging an entity
        never recurses into the object graph.
        """
        result: dict[str, Any] = dict(self.data)
        for handle in self._handles():
            if isinstance(handle, Reference) and handle.is_loaded:
                target = handle.get
                result[handle.name] = str(target) if target is not None else None
        return result

    # -- traversal -----------------------------------------------------------

    async def load(self, fn: PathLike) -> Any:
        """Declaratively load several layers of relations at once.

        I.e.::

            publisher = await book.load(lambda b: b.author.publisher)
            books = await publisher.load(lambda p: p.authors.books)

        Returns an entity (or None) when every hop is a reference, and a
        de-duplicated list once any hop goes through a collection.
        """
        config = self.em.config
        lens_path = record_path(fn, strict=config.strict_lens)
        if len(lens_path) > config.max_hops:
            raise MalformedPathError(
                entity_name=self.metadata.name,
                operation="load",
                detail=f"path has {len(lens_path)} hops, the limit is {config.max_hops}",
            )
        if config.validate_paths:
            validate_path(self.metadata, lens_path)
        return await walk(self, lens_path)

    traverse = load

    async def populate(self, hint: Hint) -> BaseEntity:
        """Load every relation named by ``hint``; see ``EntityManager.populate``."""
        await self.em.populate(self, hint)
        return self
