"""Tests for BaseEntity field access, state flags and serialization."""

from __future__ import annotations

import pytest
from bookstore import Author, Book, Publisher
from ninja_orm.exceptions import UnassignedIdError


def test_fields_are_attributes(em):
    author = Author(em, first_name="Ursula", last_name="Le Guin")
    assert author.first_name == "Ursula"
    assert author.last_name == "Le Guin"
    assert author.age is None


def test_unknown_attribute_raises(em):
    author = Author(em, first_name="a")
    with pytest.raises(AttributeError):
        author.nickname


def test_new_entity_state(em):
    author = Author(em, first_name="a")
    assert author.id is None
    assert author.is_new_entity
    assert not author.is_dirty_entity
    assert not author.is_deleted_entity
    assert author.is_pending_flush


def test_id_or_fail_before_flush(em):
    author = Author(em, first_name="a")
    with pytest.raises(UnassignedIdError, match="Entity has no id yet"):
        author.id_or_fail


async def test_id_or_fail_after_flush(em):
    author = Author(em, first_name="a")
    await em.flush()
    assert author.id_or_fail == "a:1"
    assert not author.is_pending_flush


async def test_field_change_marks_dirty(em):
    author = Author(em, first_name="a")
    await em.flush()

    author.first_name = "b"

    assert author.is_dirty_entity
    assert author.is_pending_flush
    assert author.original_data == {"first_name": "a"}


async def test_changing_back_clears_dirty(em):
    author = Author(em, first_name="a")
    await em.flush()

    author.first_name = "b"
    author.first_name = "c"
    assert author.original_data == {"first_name": "a"}
    author.first_name = "a"
    assert not author.is_dirty_entity


async def test_setting_same_value_is_not_dirty(em):
    author = Author(em, first_name="a")
    await em.flush()
    author.first_name = "a"
    assert not author.is_dirty_entity


async def test_reference_change_marks_dirty(em):
    p1 = Publisher(em, name="p1")
    p2 = Publisher(em, name="p2")
    author = Author(em, first_name="a", publisher=p1)
    await em.flush()

    author.publisher.set(p2)
    assert author.original_data == {"publisher": p1}
    author.publisher.set(p1)
    assert not author.is_dirty_entity


async def test_set_many_values(em):
    publisher = Publisher(em, name="p")
    author = Author(em, first_name="a")
    author.set(first_name="b", age=40, publisher=publisher)

    assert author.first_name == "b"
    assert author.age == 40
    assert author.publisher.get is publisher


def test_set_rejects_collections_and_unknown_names(em):
    author = Author(em, first_name="a")
    with pytest.raises(AttributeError, match="not a field or reference"):
        author.set(books=[])
    with pytest.raises(AttributeError, match="not a field or reference"):
        author.set(nickname="x")


def test_constructor_rejects_unknown_options(em):
    with pytest.raises(AttributeError):
        Author(em, nickname="x")


async def test_pending_delete_state(em):
    author = Author(em, first_name="a")
    await em.flush()

    em.delete(author)

    assert author.is_pending_delete
    assert author.is_deleted_entity
    assert author.is_pending_flush


async def test_str_and_repr(em):
    book = Book(em, title="t")
    assert str(book) == "Book#new"
    await em.flush()
    assert str(book) == "Book#b:1"
    assert repr(book) == "<Book#b:1>"


async def test_to_json_is_shallow(em):
    publisher = Publisher(em, name="Penguin")
    author = Author(em, first_name="Ursula", publisher=publisher)
    await em.flush()

    assert author.to_json() == {
        "id": "a:1",
        "first_name": "Ursula",
        "publisher": "Publisher#p:1",
        "mentor": None,
    }


async def test_populate_returns_entity(em):
    publisher = Publisher(em, name="p")
    Author(em, first_name="a", publisher=publisher)

    assert await publisher.populate("authors") is publisher
    assert len(publisher.authors.get) == 1
