#!/usr/bin/env python3
"""Example 2: Relations and Flush — editing the graph and saving it.

Demonstrates:
- Both sides of a relation kept in sync when one side changes
- Many-to-many membership edits
- Dirty tracking on fields and references
- Validation rules blocking a flush
- Deleting an entity and detaching it from loaded collections
- Pre-loading a subgraph with populate()
"""

import asyncio
import logging

from _bookstore_schema import Shelf, build_catalog

from ninja_orm import EntityManager, RuleViolationError

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


async def main() -> None:
    em = EntityManager()
    catalog = build_catalog(em)
    await em.flush()

    print("=" * 60)
    print("  Relations and Flush: Bookstore Catalog")
    print("=" * 60)

    le_guin, banks = catalog["le_guin"], catalog["banks"]
    earthsea = catalog["earthsea"]

    # ---------------------------------------------------------------------------
    # 1. Moving a book between authors
    # ---------------------------------------------------------------------------

    await le_guin.books.load()
    await banks.books.load()
    earthsea.author.set(banks)
    print("\n✍️  Moved 'A Wizard of Earthsea' to Banks:")
    print(f"   Le Guin: {[b.title for b in le_guin.books.get]}")
    print(f"   Banks:   {[b.title for b in banks.books.get]}")
    print(f"   Dirty: {earthsea.is_dirty_entity} (was {earthsea.original_data['author']})")

    earthsea.author.set(le_guin)
    print(f"   Moved back, dirty: {earthsea.is_dirty_entity}")

    # ---------------------------------------------------------------------------
    # 2. Many-to-many membership
    # ---------------------------------------------------------------------------

    staff = catalog["staff"]
    earthsea.shelves.add(staff)
    print(f"\n🗂️  Staff picks: {[b.title for b in await staff.books.load()]}")

    # ---------------------------------------------------------------------------
    # 3. Rules
    # ---------------------------------------------------------------------------

    Shelf(em, label="")
    print("\n🚫 Flushing a shelf without a label:")
    try:
        await em.flush()
    except RuleViolationError as exc:
        print(f"   {exc}")
        for entity, _message in exc.errors:
            em.delete(entity)

    # ---------------------------------------------------------------------------
    # 4. Delete and detach
    # ---------------------------------------------------------------------------

    player = catalog["player"]
    em.delete(player)
    saved = await em.flush()
    print(f"\n🗑️  Flushed {len(saved)} entities after deleting '{player.title}'")
    print(f"   Banks now has: {[b.title for b in banks.books.get]}")
    print(f"   Staff picks:   {[b.title for b in staff.books.get]}")

    # ---------------------------------------------------------------------------
    # 5. Populate
    # ---------------------------------------------------------------------------

    orbit = await catalog["orbit"].populate({"authors": {"books": "shelves"}})
    print("\n📦 Populated Orbit:")
    for author in orbit.authors.get:
        for book in author.books.get:
            print(f"   {author.name}: {book.title} on {[s.label for s in book.shelves.get]}")


asyncio.run(main())
