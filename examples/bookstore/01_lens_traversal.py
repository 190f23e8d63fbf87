#!/usr/bin/env python3
"""Example 1: Lens Traversal — walking the object graph with one lambda.

Demonstrates:
- Following references (singular hops) to a single entity
- Fanning out through collections to a de-duplicated list
- Many-to-many hops and convergent paths
- Pre-built paths with path().edge()
- Malformed lens functions rejected before anything loads
"""

import asyncio

from _bookstore_schema import build_catalog

from ninja_orm import EntityManager, MalformedPathError, path


async def main() -> None:
    em = EntityManager()
    catalog = build_catalog(em)
    await em.flush()

    print("=" * 60)
    print("  Lens Traversal: Bookstore Catalog")
    print("=" * 60)

    # ---------------------------------------------------------------------------
    # 1. Singular hops
    # ---------------------------------------------------------------------------

    publisher = await catalog["player"].load(lambda b: b.author.publisher)
    print(f"\n📖 Publisher of 'The Player of Games': {publisher.name} ({publisher})")

    # ---------------------------------------------------------------------------
    # 2. Fan-out through collections
    # ---------------------------------------------------------------------------

    books = await catalog["orbit"].load(lambda p: p.authors.books)
    print(f"\n📚 Orbit books ({len(books)}):")
    for book in books:
        print(f"   {book.title}")

    # ---------------------------------------------------------------------------
    # 3. Many-to-many, converging on the same entities
    # ---------------------------------------------------------------------------

    shelves = await catalog["tor"].load(lambda p: p.authors.books.shelves)
    print(f"\n🗂️  Shelves holding Tor books: {[s.label for s in shelves]}")

    publishers = await catalog["award"].load(lambda s: s.books.author.publisher)
    print(f"🏆 Publishers of award winners: {[p.name for p in publishers]}")

    # ---------------------------------------------------------------------------
    # 4. Pre-built paths
    # ---------------------------------------------------------------------------

    same_author = path().edge("author").edge("books")
    siblings = await catalog["earthsea"].load(same_author)
    print(f"\n🔗 {same_author}: {[b.title for b in siblings]}")

    # ---------------------------------------------------------------------------
    # 5. Malformed lens functions
    # ---------------------------------------------------------------------------

    print("\n🚫 Lens that branches on a relation:")
    try:
        await catalog["tor"].load(lambda p: p.authors if p.authors else None)
    except MalformedPathError as exc:
        print(f"   {exc}")

    print("\n🚫 Lens naming a field instead of a relation:")
    try:
        await catalog["player"].load(lambda b: b.author.name)
    except MalformedPathError as exc:
        print(f"   {exc}")


asyncio.run(main())
