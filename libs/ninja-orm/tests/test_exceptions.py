"""Tests for the ORM domain exceptions module."""

from ninja_orm.exceptions import (
    EdgeResolutionError,
    MalformedPathError,
    OrmError,
    RelationNotLoadedError,
    RuleViolationError,
    UnassignedIdError,
)


def test_orm_error_message():
    """OrmError formats entity, operation and detail into message."""
    exc = OrmError(entity_name="Author", operation="load", detail="something broke")
    assert str(exc) == "[Author] load failed: something broke"
    assert exc.entity_name == "Author"
    assert exc.operation == "load"
    assert exc.detail == "something broke"


def test_orm_error_without_entity():
    """Errors raised before an entity is known omit the entity prefix."""
    exc = OrmError(operation="record_path", detail="bad lens")
    assert str(exc) == "record_path failed: bad lens"
    assert exc.entity_name is None


def test_orm_error_with_cause():
    """OrmError chains the original cause."""
    cause = ValueError("original")
    exc = OrmError(entity_name="Author", operation="load", detail="wrapped", cause=cause)
    assert exc.__cause__ is cause


def test_edge_resolution_error_keeps_relation():
    exc = EdgeResolutionError(entity_name="Author", operation="load", detail="timeout", relation="books")
    assert isinstance(exc, OrmError)
    assert exc.relation == "books"


def test_rule_violation_error_lists_every_failure():
    exc = RuleViolationError([("Publisher#new", "Cannot have 13 authors"), ("Author#a:1", "Needs a name")])
    assert exc.operation == "flush"
    assert exc.errors[1] == ("Author#a:1", "Needs a name")
    assert str(exc) == "flush failed: Publisher#new: Cannot have 13 authors; Author#a:1: Needs a name"


def test_subclasses_are_orm_errors():
    """Every domain error can be caught as OrmError."""
    for cls in (MalformedPathError, UnassignedIdError, RelationNotLoadedError):
        exc = cls(operation="op", detail="d")
        assert isinstance(exc, OrmError)
