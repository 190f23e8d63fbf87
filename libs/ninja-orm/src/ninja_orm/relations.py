"""Edge handles: references, collections and custom (computed) collections.

Every handle is tagged with its ``EdgeKind`` and exposes ``await handle.load()``.
A handle fetches from the entity manager's data provider at most once; callers
that ``load()`` concurrently share the same in-flight fetch.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from ninja_orm.exceptions import EdgeResolutionError, OrmError, RelationNotLoadedError
from ninja_orm.metadata import Cardinality, RelationSchema, get_entity_class
from ninja_orm.protocols import EdgeKind
from ninja_orm.walker import unique

if TYPE_CHECKING:
    from ninja_orm.entity import BaseEntity

logger = logging.getLogger(__name__)


class _Handle:
    kind: EdgeKind

    def __init__(self, entity: BaseEntity, name: str) -> None:
        self.entity = entity
        self.name = name
        self._loaded = False
        self._pending: asyncio.Future[None] | None = None

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def _check_loaded(self) -> None:
        if not self._loaded:
            raise RelationNotLoadedError(
                entity_name=self.entity.metadata.name,
                operation="get",
                detail=f"{self.name!r} has not been loaded; await {self.name}.load() first",
            )

    async def _fetch(self) -> Any:
        raise NotImplementedError

    def _apply(self, value: Any) -> None:
        pass

    async def _run_fetch(self) -> None:
        entity_name = self.entity.metadata.name
        logger.debug("fetch %s.%s for %s", entity_name, self.name, self.entity)
        try:
            value = await self._fetch()
        except EdgeResolutionError:
            raise
        except Exception as exc:
            logger.warning("Loading %s.%s failed: %s", entity_name, self.name, type(exc).__name__)
            raise EdgeResolutionError(
                entity_name=entity_name,
                operation="load",
                detail=f"could not load {self.name!r} for {self.entity}",
                relation=self.name,
                cause=exc,
            ) from exc
        finally:
            self._pending = None
        self._apply(value)
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run_fetch())
        await self._pending

    def __repr__(self) -> str:
        state = "loaded" if self._loaded else "unloaded"
        return f"<{type(self).__name__} {self.entity}.{self.name} {state}>"


class Reference(_Handle):
    """A singular relation.

    ``many_to_one`` references hold their target directly and are always loaded.
    ``one_to_one`` references are the non-owning side of a ``many_to_one`` on the
    target entity; they are loaded through the data provider and ``set()`` writes
    through to that owning reference.
    """

    kind = EdgeKind.SINGULAR

    def __init__(self, entity: BaseEntity, relation: RelationSchema) -> None:
        super().__init__(entity, relation.name)
        self.relation = relation
        self._target: BaseEntity | None = None
        self._loaded = relation.cardinality is Cardinality.MANY_TO_ONE

    @property
    def get(self) -> BaseEntity | None:
        self._check_loaded()
        return self._target

    @property
    def is_set(self) -> bool:
        return self.get is not None

    async def load(self) -> BaseEntity | None:
        await self._ensure_loaded()
        return self._target

    async def _fetch(self) -> BaseEntity | None:
        return await self.entity.em.provider.load_reference(self.entity, self.relation)

    def _apply(self, value: Any) -> None:
        self._target = value

    def set(self, other: BaseEntity | None) -> None:
        if self.relation.cardinality is Cardinality.ONE_TO_ONE:
            if other is not None:
                getattr(other, self.relation.inverse).set(self.entity)
            elif self._loaded:
                if self._target is not None:
                    getattr(self._target, self.relation.inverse).set(None)
            else:
                owner_cls = get_entity_class(self.relation.target_entity)
                for owner in self.entity.em.entities:
                    if isinstance(owner, owner_cls):
                        owning = getattr(owner, self.relation.inverse)
                        if owning.get is self.entity:
                            owning.set(None)
                self._target = None
                self._loaded = True
            return

        old = self._target
        if old is other:
            return
        self.entity._track(self.name, old, other)
        self._target = other
        if self.relation.inverse:
            if old is not None:
                getattr(old, self.relation.inverse)._unlink(self.entity)
            if other is not None:
                getattr(other, self.relation.inverse)._link(self.entity)

    def _link(self, other: BaseEntity) -> None:
        if self._loaded:
            previous = self._target
            if previous is not None and previous is not other:
                # one-to-one: the previous owner loses this entity
                getattr(previous, self.relation.inverse).set(None)
            self._target = other

    def _unlink(self, other: BaseEntity) -> None:
        if self._loaded and self._target is other:
            self._target = None


class Collection(_Handle):
    """A plural relation.

    ``one_to_many`` collections are derived from the ``many_to_one`` named by
    ``inverse``; ``many_to_many`` collections keep membership on both sides.
    Changes made before the collection is loaded are merged into the fetched
    members.
    """

    kind = EdgeKind.PLURAL

    def __init__(self, entity: BaseEntity, relation: RelationSchema) -> None:
        super().__init__(entity, relation.name)
        self.relation = relation
        self._items: list[BaseEntity] = []
        self._added: list[BaseEntity] = []
        self._removed: list[BaseEntity] = []

    @property
    def get(self) -> list[BaseEntity]:
        self._check_loaded()
        return list(self._items)

    async def load(self) -> list[BaseEntity]:
        await self._ensure_loaded()
        return list(self._items)

    async def _fetch(self) -> list[BaseEntity]:
        return await self.entity.em.provider.load_collection(self.entity, self.relation)

    def _apply(self, value: Any) -> None:
        removed = {id(e) for e in self._removed}
        self._items = [e for e in unique([*value, *self._added]) if id(e) not in removed]
        self._added.clear()
        self._removed.clear()

    def add(self, other: BaseEntity) -> None:
        if self.relation.cardinality is Cardinality.ONE_TO_MANY:
            getattr(other, self.relation.inverse).set(self.entity)
        else:
            self._link(other)
            getattr(other, self.relation.inverse)._link(self.entity)

    def remove(self, other: BaseEntity) -> None:
        if self.relation.cardinality is Cardinality.ONE_TO_MANY:
            reference = getattr(other, self.relation.inverse)
            if reference.get is self.entity:
                reference.set(None)
        else:
            self._unlink(other)
            getattr(other, self.relation.inverse)._unlink(self.entity)

    def _link(self, other: BaseEntity) -> None:
        if self._loaded:
            if all(e is not other for e in self._items):
                self._items.append(other)
        else:
            self._removed = [e for e in self._removed if e is not other]
            self._added.append(other)

    def _unlink(self, other: BaseEntity) -> None:
        if self._loaded:
            self._items = [e for e in self._items if e is not other]
        else:
            self._added = [e for e in self._added if e is not other]
            self._removed.append(other)

    def __len__(self) -> int:
        return len(self.get)

    def __contains__(self, other: object) -> bool:
        return any(e is other for e in self.get)


class CustomCollection(_Handle):
    """A computed, read-mostly collection.

    Args:
        entity: The owning entity.
        name: Attribute name the collection is assigned to.
        load: Called once to bring the underlying relations into memory; may be a
            coroutine function (typically ``lambda e: e.populate(hint)``).
        get: Computes the members from already-loaded relations.
        add: Optional hook implementing ``collection.add(value)``.
        remove: Optional hook implementing ``collection.remove(value)``.
    """

    kind = EdgeKind.PLURAL

    def __init__(
        self,
        entity: BaseEntity,
        name: str,
        *,
        load: Callable[[Any], Awaitable[Any] | Any],
        get: Callable[[Any], list[Any]],
        add: Callable[[Any, Any], None] | None = None,
        remove: Callable[[Any, Any], None] | None = None,
    ) -> None:
        super().__init__(entity, name)
        self._load_fn = load
        self._get_fn = get
        self._add_fn = add
        self._remove_fn = remove

    @property
    def get(self) -> list[Any]:
        self._check_loaded()
        return list(self._get_fn(self.entity))

    async def load(self) -> list[Any]:
        await self._ensure_loaded()
        return self.get

    async def _fetch(self) -> None:
        result = self._load_fn(self.entity)
        if inspect.isawaitable(result):
            await result

    def add(self, value: Any) -> None:
        if self._add_fn is None:
            raise OrmError(entity_name=self.entity.metadata.name, operation="add", detail=f"{self.name!r} is read-only")
        self._add_fn(self.entity, value)

    def remove(self, value: Any) -> None:
        if self._remove_fn is None:
            raise OrmError(
                entity_name=self.entity.metadata.name, operation="remove", detail=f"{self.name!r} is read-only"
            )
        self._remove_fn(self.entity, value)
