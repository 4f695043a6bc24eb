"""Seed the projected relation with sample rows.

Creates the configured relation from the configured schema (if missing) and
inserts sample users for local development.

Usage:
    python -m app.scripts.seed_database

The script is idempotent - rows whose ``id`` already exists are skipped.
Only the default ``id:int,name:string,email:string,age:int`` style schema is
seeded; sample values for columns outside it are left NULL.

The application itself opens read-only transactions on PostgreSQL, so this
script needs credentials that are allowed to write.
"""

import asyncio

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.config import settings
from app.projections.schema import Relation, Schema

SAMPLE_ROWS = [
    {"id": 1, "name": "Alice", "email": "alice@example.com", "age": 30},
    {"id": 2, "name": "Bob", "email": "bob@example.com", "age": 25},
    {"id": 3, "name": "Carol", "email": "carol@example.com", "age": 41},
]


async def verify_connection(engine: AsyncEngine) -> bool:
    """Verify the database connection is working."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("  Database: connected")
    except Exception as e:
        print(f"  Database: FAILED - {e}")
        return False
    return True


async def seed_database(engine: AsyncEngine, relation: Relation) -> dict[str, int]:
    """
    Create the relation and insert sample rows.

    Args:
        engine: Engine with write access.
        relation: Relation to create and fill.

    Returns:
        Dictionary with counts: rows_inserted, rows_skipped.
    """
    stats = {"rows_inserted": 0, "rows_skipped": 0}
    table = relation.table
    known = set(relation.schema.names)

    async with engine.begin() as conn:
        await conn.run_sync(table.metadata.create_all)

        existing: set = set()
        if "id" in known:
            result = await conn.execute(select(table.c["id"]))
            existing = {row[0] for row in result}

        for sample in SAMPLE_ROWS:
            if sample.get("id") in existing:
                stats["rows_skipped"] += 1
                continue
            values = {name: value for name, value in sample.items() if name in known}
            await conn.execute(table.insert().values(**values))
            stats["rows_inserted"] += 1

    return stats


async def _run() -> dict[str, int] | None:
    relation = Relation(settings.projection_relation, Schema.parse(settings.projection_schema))
    engine = create_async_engine(settings.database_url)
    try:
        print("\nVerifying database connection...")
        if not await verify_connection(engine):
            return None
        print(f"\nSeeding {relation.name}...")
        return await seed_database(engine, relation)
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point for the seed script."""
    print("=" * 50)
    print("Field Projector Database Seeding")
    print("=" * 50)

    stats = asyncio.run(_run())
    if stats is None:
        raise SystemExit(1)

    print("\n" + "=" * 50)
    print("Summary")
    print("=" * 50)
    print(f"  Rows inserted: {stats['rows_inserted']}")
    print(f"  Rows skipped: {stats['rows_skipped']}")
    print("\nDatabase seeding complete!")


if __name__ == "__main__":
    main()
