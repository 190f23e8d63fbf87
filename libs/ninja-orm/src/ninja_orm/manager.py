"""Entity manager: identity map, in-memory data provider, and flush lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar, Union

from ninja_orm.config import OrmConfig, load_orm_config
from ninja_orm.entity import BaseEntity
from ninja_orm.exceptions import RuleViolationError
from ninja_orm.metadata import Cardinality, RelationSchema, get_entity_class
from ninja_orm.protocols import DataProvider
from ninja_orm.relations import Collection
from ninja_orm.walker import fan_out

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEntity)

# "books", ["books", "image"], {"authors": {"books": "image"}}
Hint = Union[str, Sequence["Hint"], Mapping[str, "Hint"], None]


def normalize_hint(hint: Hint) -> dict[str, Any]:
    """Turn any hint shape into a ``{relation: sub_hint}`` dict."""
    if hint is None:
        return {}
    if isinstance(hint, str):
        return {hint: None}
    if isinstance(hint, Mapping):
        return dict(hint)
    merged: dict[str, Any] = {}
    for item in hint:
        for name, sub in normalize_hint(item).items():
            if merged.get(name) is None:
                merged[name] = sub
            elif sub is not None:
                merged[name] = [merged[name], sub]
    return merged


class EntityManager:
    """Tracks every entity of a unit of work.

    The manager keeps one object per logical entity, so the same entity reached
    through two different relations is the same Python object. It also serves as
    the default ``DataProvider``: derived relations (``one_to_many`` collections,
    ``one_to_one`` references) are answered by scanning the identity map for
    entities whose owning reference points back.
    """

    def __init__(self, provider: DataProvider | None = None, config: OrmConfig | None = None) -> None:
        self._entities: list[BaseEntity] = []
        self._next_ids: dict[str, int] = {}
        self.provider: DataProvider = provider if provider is not None else self
        self.config = config if config is not None else load_orm_config()

    # -- identity map --------------------------------------------------------

    def register(self, entity: BaseEntity) -> None:
        self._entities.append(entity)

    @property
    def entities(self) -> list[BaseEntity]:
        return list(self._entities)

    def find(self, cls: type[E], entity_id: str) -> E | None:
        for entity in self._entities:
            if isinstance(entity, cls) and entity.id == entity_id:
                return entity
        return None

    def delete(self, entity: BaseEntity) -> None:
        """Mark ``entity`` for deletion on the next flush."""
        entity._deleted = "pending"

    # -- DataProvider --------------------------------------------------------

    def _pointing_at(self, entity: BaseEntity, relation: RelationSchema) -> list[BaseEntity]:
        target_cls = get_entity_class(relation.target_entity)
        return [
            candidate
            for candidate in self._entities
            if isinstance(candidate, target_cls) and getattr(candidate, relation.inverse).get is entity
        ]

    async def load_reference(self, entity: BaseEntity, relation: RelationSchema) -> BaseEntity | None:
        matches = self._pointing_at(entity, relation)
        return matches[0] if matches else None

    async def load_collection(self, entity: BaseEntity, relation: RelationSchema) -> list[BaseEntity]:
        if relation.cardinality is Cardinality.MANY_TO_MANY:
            # Membership lives on the collection handles themselves.
            return []
        return self._pointing_at(entity, relation)

    # -- populate ------------------------------------------------------------

    async def populate(self, entities: BaseEntity | Sequence[BaseEntity], hint: Hint) -> None:
        """Load every relation named in ``hint``, level by level.

        Sibling relations of one level are loaded concurrently; nested hints are
        applied to the de-duplicated entities each relation reached.
        """
        targets = [entities] if isinstance(entities, BaseEntity) else list(entities)
        if not targets:
            return
        await asyncio.gather(
            *(self._populate_relation(targets, name, sub) for name, sub in normalize_hint(hint).items())
        )

    async def _populate_relation(self, targets: list[BaseEntity], name: str, sub: Hint) -> None:
        reached = await fan_out(targets, name)
        if sub:
            await self.populate(reached, sub)

    # -- flush ---------------------------------------------------------------

    async def flush(self) -> list[BaseEntity]:
        """Validate rules and settle every pending entity.

        New entities get ids, dirty entities are marked clean, and entities
        pending delete are detached from every relation and dropped from the
        identity map. Nothing is written anywhere.

        Rules registered with a relation trigger get that relation loaded first,
        so they can read it with ``.get``.

        Raises:
            RuleViolationError: If any rule fails; no entity is changed.
        """
        pending = [e for e in self._entities if e.is_pending_flush]
        errors: list[tuple[object, str]] = []
        for entity in pending:
            if entity.is_pending_delete:
                continue
            config = type(entity).config
            hint = [t for t, _ in config.rules if t is not None and entity.metadata.relation(t) is not None]
            if hint:
                await self.populate(entity, hint)
            for message in await config.validate(entity):
                errors.append((entity, message))
        if errors:
            logger.info("flush rejected: %d rule violation(s)", len(errors))
            raise RuleViolationError(errors)

        deleted = [e for e in pending if e.is_pending_delete]
        for entity in deleted:
            self._detach(entity)
            entity._deleted = "deleted"
        self._entities = [e for e in self._entities if not e.is_deleted_entity]

        inserted = updated = 0
        for entity in self._entities:
            if not entity.is_pending_flush:
                continue
            if entity.is_new_entity:
                entity.data["id"] = self._assign_id(entity)
                inserted += 1
            else:
                updated += 1
            entity.original_data.clear()

        logger.info("flush: %d inserted, %d updated, %d deleted", inserted, updated, len(deleted))
        return pending

    def _assign_id(self, entity: BaseEntity) -> str:
        tag = entity.metadata.tag
        self._next_ids[tag] = self._next_ids.get(tag, 0) + 1
        return f"{tag}:{self._next_ids[tag]}"

    def _detach(self, entity: BaseEntity) -> None:
        for other in self._entities:
            if other is entity:
                continue
            for handle in other._handles():
                if isinstance(handle, Collection):
                    if handle.is_loaded or entity in handle._added:
                        handle._unlink(entity)
                elif handle.is_loaded and handle.get is entity:
                    if handle.relation.cardinality is Cardinality.MANY_TO_ONE:
                        handle.set(None)
                    else:
                        handle._unlink(entity)
