"""Bookstore entities shared by the ninja-orm tests."""

from __future__ import annotations

from enum import Enum

from ninja_orm import BaseEntity, CustomCollection, EntityMetadata, RelationSchema


class ImageType(str, Enum):
    BOOK_IMAGE = "book_image"
    AUTHOR_IMAGE = "author_image"
    PUBLISHER_IMAGE = "publisher_image"

    @property
    def sort_order(self) -> int:
        return {"book_image": 100, "author_image": 200, "publisher_image": 300}[self.value]


def _rel(name: str, target: str, cardinality: str, inverse: str | None = None, **kwargs) -> RelationSchema:
    return RelationSchema(name=name, target_entity=target, cardinality=cardinality, inverse=inverse, **kwargs)


class Publisher(BaseEntity):
    metadata = EntityMetadata(
        name="Publisher",
        fields=["name"],
        relations=[
            _rel("authors", "Author", "one_to_many", "publisher"),
            _rel("images", "Image", "one_to_many", "publisher"),
            _rel("all_images", "Image", "one_to_many", computed=True),
        ],
    )

    def __init__(self, em, **opts) -> None:
        super().__init__(em, **opts)
        self.all_images = CustomCollection(
            self,
            "all_images",
            load=lambda p: p.populate(ALL_IMAGES_HINT),
            get=_all_images,
            add=_add_image,
            remove=_remove_image,
        )


class Author(BaseEntity):
    metadata = EntityMetadata(
        name="Author",
        fields=["first_name", "last_name", "age"],
        relations=[
            _rel("publisher", "Publisher", "many_to_one", "authors"),
            _rel("mentor", "Author", "many_to_one", "mentees"),
            _rel("mentees", "Author", "one_to_many", "mentor"),
            _rel("books", "Book", "one_to_many", "author"),
            _rel("image", "Image", "one_to_one", "author"),
        ],
    )


class Book(BaseEntity):
    metadata = EntityMetadata(
        name="Book",
        fields=["title"],
        relations=[
            _rel("author", "Author", "many_to_one", "books"),
            _rel("image", "Image", "one_to_one", "book"),
            _rel("tags", "Tag", "many_to_many", "books"),
        ],
    )


class Image(BaseEntity):
    metadata = EntityMetadata(
        name="Image",
        fields=["file_name", "type"],
        relations=[
            _rel("author", "Author", "many_to_one", "image"),
            _rel("book", "Book", "many_to_one", "image"),
            _rel("publisher", "Publisher", "many_to_one", "images"),
        ],
    )


class Tag(BaseEntity):
    metadata = EntityMetadata(
        name="Tag",
        fields=["name"],
        relations=[_rel("books", "Book", "many_to_many", "tags")],
    )


ALL_IMAGES_HINT = {"images": [], "authors": {"image": [], "books": "image"}}


def _all_images(publisher: Publisher) -> list[Image]:
    images = list(publisher.images.get)
    for author in publisher.authors.get:
        images.append(author.image.get)
        images.extend(book.image.get for book in author.books.get)
    present = [image for image in images if image is not None]
    return sorted(present, key=lambda image: image.type.sort_order)


def _add_image(publisher: Publisher, image: Image) -> None:
    if image not in publisher.all_images.get:
        image.type = ImageType.PUBLISHER_IMAGE
        image.author.set(None)
        image.book.set(None)
        image.publisher.set(publisher)


def _remove_image(publisher: Publisher, image: Image) -> None:
    if image in publisher.all_images.get:
        publisher.em.delete(image)


def _not_thirteen_authors(publisher: Publisher) -> str | None:
    if len(publisher.authors.get) == 13:
        return "Cannot have 13 authors"
    return None


Publisher.config.add_rule("authors", _not_thirteen_authors)
