"""Shared bookstore entities used by all examples."""

from enum import Enum

from ninja_orm import BaseEntity, EntityManager, EntityMetadata, RelationSchema


class Genre(str, Enum):
    FICTION = "fiction"
    SCI_FI = "sci-fi"
    BIOGRAPHY = "biography"


# --- Entities ---


class Publisher(BaseEntity):
    metadata = EntityMetadata(
        name="Publisher",
        fields=["name"],
        relations=[
            RelationSchema(name="authors", target_entity="Author", cardinality="one_to_many", inverse="publisher"),
        ],
    )


class Author(BaseEntity):
    metadata = EntityMetadata(
        name="Author",
        fields=["name"],
        relations=[
            RelationSchema(name="publisher", target_entity="Publisher", cardinality="many_to_one", inverse="authors"),
            RelationSchema(name="books", target_entity="Book", cardinality="one_to_many", inverse="author"),
        ],
    )


class Book(BaseEntity):
    metadata = EntityMetadata(
        name="Book",
        fields=["title", "genre"],
        relations=[
            RelationSchema(name="author", target_entity="Author", cardinality="many_to_one", inverse="books"),
            RelationSchema(name="shelves", target_entity="Shelf", cardinality="many_to_many", inverse="books"),
        ],
    )


class Shelf(BaseEntity):
    metadata = EntityMetadata(
        name="Shelf",
        fields=["label"],
        relations=[
            RelationSchema(name="books", target_entity="Book", cardinality="many_to_many", inverse="shelves"),
        ],
    )


def _shelf_needs_label(shelf: Shelf) -> str | None:
    if not shelf.label:
        return "Shelf needs a label"
    return None


Shelf.config.add_rule("label", _shelf_needs_label)


# --- Sample data ---


def build_catalog(em: EntityManager) -> dict[str, BaseEntity]:
    """Create a small catalog: two publishers, three authors, four books, two shelves."""
    tor = Publisher(em, name="Tor")
    orbit = Publisher(em, name="Orbit")
    le_guin = Author(em, name="Ursula K. Le Guin", publisher=tor)
    banks = Author(em, name="Iain M. Banks", publisher=orbit)
    jemisin = Author(em, name="N. K. Jemisin", publisher=orbit)
    dispossessed = Book(em, title="The Dispossessed", genre=Genre.SCI_FI, author=le_guin)
    earthsea = Book(em, title="A Wizard of Earthsea", genre=Genre.FICTION, author=le_guin)
    player = Book(em, title="The Player of Games", genre=Genre.SCI_FI, author=banks)
    fifth = Book(em, title="The Fifth Season", genre=Genre.FICTION, author=jemisin)
    staff = Shelf(em, label="Staff picks", books=[dispossessed, player])
    award = Shelf(em, label="Award winners", books=[dispossessed, fifth])
    return {
        "tor": tor,
        "orbit": orbit,
        "le_guin": le_guin,
        "banks": banks,
        "jemisin": jemisin,
        "dispossessed": dispossessed,
        "earthsea": earthsea,
        "player": player,
        "fifth": fifth,
        "staff": staff,
        "award": award,
    }
