"""Ninja ORM — entities with declarative lens traversal of the object graph."""

from ninja_orm.config import OrmConfig, load_orm_config
from ninja_orm.entity import BaseEntity
from ninja_orm.exceptions import (
    EdgeResolutionError,
    MalformedPathError,
    OrmError,
    RelationNotLoadedError,
    RuleViolationError,
    UnassignedIdError,
)
from ninja_orm.lens import Path, path, record_path
from ninja_orm.manager import EntityManager, normalize_hint
from ninja_orm.metadata import Cardinality, EntityMetadata, RelationSchema, get_entity_class, validate_path
from ninja_orm.protocols import DataProvider, Edge, EdgeKind
from ninja_orm.relations import Collection, CustomCollection, Reference
from ninja_orm.rules import EntityConfig
from ninja_orm.walker import walk

__all__ = [
    "BaseEntity",
    "Cardinality",
    "Collection",
    "CustomCollection",
    "DataProvider",
    "Edge",
    "EdgeKind",
    "EdgeResolutionError",
    "EntityConfig",
    "EntityManager",
    "EntityMetadata",
    "MalformedPathError",
    "OrmConfig",
    "OrmError",
    "Path",
    "Reference",
    "RelationNotLoadedError",
    "RelationSchema",
    "RuleViolationError",
    "UnassignedIdError",
    "get_entity_class",
    "load_orm_config",
    "normalize_hint",
    "path",
    "record_path",
    "validate_path",
    "walk",
]
