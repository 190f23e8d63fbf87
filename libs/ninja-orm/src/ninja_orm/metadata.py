"""Entity and relation metadata, plus the process-wide entity registry."""

from __future__ import annotations

import keyword
import re
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator, model_validator

from ninja_orm.exceptions import MalformedPathError
from ninja_orm.lens import Path
from ninja_orm.protocols import EdgeKind

if TYPE_CHECKING:
    from ninja_orm.entity import BaseEntity

# Valid identifier: starts with letter, alphanumeric + underscores, max 64 chars.
_IDENTIFIER_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,63}$")

# Names used by BaseEntity itself; a field or relation with one of these names
# would shadow the entity API.
_RESERVED_NAMES: frozenset[str] = frozenset(
    {
        "config",
        "data",
        "em",
        "id",
        "id_or_fail",
        "is_deleted_entity",
        "is_dirty_entity",
        "is_new_entity",
        "is_pending_delete",
        "is_pending_flush",
        "load",
        "metadata",
        "original_data",
        "populate",
        "set",
        "to_json",
        "traverse",
    }
)


def _check_identifier(kind: str, v: str) -> str:
    if not _IDENTIFIER_RE.match(v):
        raise ValueError(
            f"{kind} name {v!r} is not a valid identifier. "
            "Must start with a letter, contain only alphanumeric characters "
            "and underscores, and be at most 64 characters."
        )
    if keyword.iskeyword(v):
        raise ValueError(f"{kind} name {v!r} is a Python reserved keyword.")
    return v


class Cardinality(str, Enum):
    """Cardinality of a relation, seen from the entity declaring it."""

    ONE_TO_ONE = "one_to_one"
    MANY_TO_ONE = "many_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"

    @property
    def kind(self) -> EdgeKind:
        if self in (Cardinality.ONE_TO_ONE, Cardinality.MANY_TO_ONE):
            return EdgeKind.SINGULAR
        return EdgeKind.PLURAL


class RelationSchema(BaseModel):
    """A relation from the declaring entity to ``target_entity``.

    ``many_to_one`` references own their value. ``one_to_one`` references are the
    non-owning side of a ``many_to_one`` declared on the target, and
    ``one_to_many`` collections are derived from one; both need ``inverse``.
    ``computed`` relations are custom collections the entity builds itself.
    """

    name: str = Field(min_length=1, description="Attribute name of the relation.")
    target_entity: str = Field(min_length=1, description="Name of the related entity.")
    cardinality: Cardinality = Field(description="Cardinality of the relation.")
    inverse: str | None = Field(default=None, description="Relation name on the target pointing back.")
    computed: bool = Field(default=False, description="Handle is assigned by the entity subclass.")
    description: str | None = Field(default=None, description="Human-readable description.")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("name")
    @classmethod
    def validate_relation_name(cls, v: str) -> str:
        _check_identifier("Relation", v)
        if v in _RESERVED_NAMES:
            raise ValueError(f"Relation name {v!r} would shadow the entity API.")
        return v

    @model_validator(mode="after")
    def validate_inverse(self) -> RelationSchema:
        """Derived relations must name the reference they are derived from."""
        if self.computed:
            if self.cardinality.kind is not EdgeKind.PLURAL:
                raise ValueError(f"Computed relation '{self.name}' must be a collection")
            return self
        derived = (Cardinality.ONE_TO_ONE, Cardinality.ONE_TO_MANY, Cardinality.MANY_TO_MANY)
        if self.cardinality in derived and not self.inverse:
            raise ValueError(f"Relation '{self.name}' ({self.cardinality.value}) requires an inverse")
        return self

    @property
    def kind(self) -> EdgeKind:
        return self.cardinality.kind


class EntityMetadata(BaseModel):
    """Field and relation layout of one entity class."""

    name: str = Field(min_length=1, description="Entity name (PascalCase recommended).")
    tag: str = Field(default="", description="Id prefix, e.g. 'a' for 'a:1'. Defaults to the name's initial.")
    fields: list[str] = Field(default_factory=list, description="Plain data fields (the id is implicit).")
    relations: list[RelationSchema] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_entity_name(cls, v: str) -> str:
        return _check_identifier("Entity", v)

    @field_validator("fields")
    @classmethod
    def validate_field_names(cls, v: list[str]) -> list[str]:
        for name in v:
            _check_identifier("Field", name)
            if name in _RESERVED_NAMES:
                raise ValueError(f"Field name {name!r} would shadow the entity API.")
        return v

    @model_validator(mode="after")
    def validate_entity_integrity(self) -> EntityMetadata:
        """Validate unique names across fields and relations, and default the tag."""
        seen: set[str] = set()
        for name in [*self.fields, *(r.name for r in self.relations)]:
            if name in seen:
                raise ValueError(f"Entity '{self.name}' declares '{name}' more than once")
            seen.add(name)
        if not self.tag:
            self.tag = self.name[0].lower()
        return self

    def relation(self, name: str) -> RelationSchema | None:
        for rel in self.relations:
            if rel.name == name:
                return rel
        return None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_ENTITY_CLASSES: dict[str, type[BaseEntity]] = {}


def register_entity(cls: type[BaseEntity]) -> None:
    """Make ``cls`` resolvable by its metadata name.

    Raises:
        ValueError: If a different class is already registered under that name.
    """
    name = cls.metadata.name
    existing = _ENTITY_CLASSES.get(name)
    if existing is not None and existing is not cls:
        raise ValueError(
            f"Entity {name!r} is already registered by {existing.__module__}.{existing.__qualname__}"
        )
    _ENTITY_CLASSES[name] = cls


def get_entity_class(name: str) -> type[BaseEntity]:
    try:
        return _ENTITY_CLASSES[name]
    except KeyError:
        raise LookupError(f"Unknown entity: {name!r}") from None


def validate_path(metadata: EntityMetadata, path: Path) -> bool:
    """Check every hop of ``path`` against the metadata graph.

    Returns True when the walk will produce a list, i.e. when any hop is a
    collection.

    Raises:
        MalformedPathError: If a hop is not a relation of the entity it starts from.
    """
    plural = False
    current = metadata
    for hop in path:
        rel = current.relation(hop)
        if rel is None:
            raise MalformedPathError(
                entity_name=current.name,
                operation="validate_path",
                detail=f"{hop!r} is not a relation (path {str(path)!r})",
            )
        plural = plural or rel.kind is EdgeKind.PLURAL
        try:
            current = get_entity_class(rel.target_entity).metadata
        except LookupError as exc:
            raise MalformedPathError(
                entity_name=current.name,
                operation="validate_path",
                detail=f"relation {hop!r} targets unregistered entity {rel.target_entity!r}",
                cause=exc,
            ) from exc
    return plural
