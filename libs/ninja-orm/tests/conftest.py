"""Shared fixtures for ninja-orm tests."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from bookstore import Author, Book, Image, ImageType, Publisher, Tag
from ninja_orm.config import OrmConfig
from ninja_orm.manager import EntityManager


@pytest.fixture
def em() -> EntityManager:
    return EntityManager(config=OrmConfig())


@dataclass
class Bookstore:
    """A small graph: two publishers, three authors, four books.

    p1 <- a1 (mentor of a2), a2 ; p2 <- a3
    a1 -> b1, b2 ; a2 -> b3 ; a3 -> b4
    b1, b3 tagged "classic"; b2 tagged "classic" and "new"
    """

    p1: Publisher
    p2: Publisher
    a1: Author
    a2: Author
    a3: Author
    b1: Book
    b2: Book
    b3: Book
    b4: Book
    classic: Tag
    new: Tag


@pytest.fixture
def store(em: EntityManager) -> Bookstore:
    p1 = Publisher(em, name="Penguin")
    p2 = Publisher(em, name="Tor")
    a1 = Author(em, first_name="Ursula", publisher=p1)
    a2 = Author(em, first_name="Iain", publisher=p1, mentor=a1)
    a3 = Author(em, first_name="Ann", publisher=p2)
    b1 = Book(em, title="The Dispossessed", author=a1)
    b2 = Book(em, title="The Lathe of Heaven", author=a1)
    b3 = Book(em, title="Excession", author=a2)
    b4 = Book(em, title="Annihilation", author=a3)
    classic = Tag(em, name="classic", books=[b1, b2, b3])
    new = Tag(em, name="new", books=[b2])
    return Bookstore(p1, p2, a1, a2, a3, b1, b2, b3, b4, classic, new)


@pytest.fixture
def images(em: EntityManager, store: Bookstore) -> dict[str, Image]:
    return {
        "p1": Image(em, file_name="p1.png", type=ImageType.PUBLISHER_IMAGE, publisher=store.p1),
        "a1": Image(em, file_name="a1.png", type=ImageType.AUTHOR_IMAGE, author=store.a1),
        "b1": Image(em, file_name="b1.png", type=ImageType.BOOK_IMAGE, book=store.b1),
        "b3": Image(em, file_name="b3.png", type=ImageType.BOOK_IMAGE, book=store.b3),
    }
