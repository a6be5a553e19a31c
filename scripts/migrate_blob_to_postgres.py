"""
Migrate conversions from the JSON blob store to the SQL table
Run this after initializing the schema (scripts/init_postgres.py)
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import CONVERSIONS_KEY
from core.database import get_session_factory, init_db
from models.conversions import ConversionRow
from utils.conversion_store import ConversionStore, DatabaseConversionStore, JsonKeyStorage


def migrate_conversions(source: ConversionStore, target: DatabaseConversionStore, session_factory) -> int:
    """Copy every blob record into the table, oldest first, skipping ids already present."""
    db = session_factory()
    try:
        existing = {row_id for (row_id,) in db.query(ConversionRow.id).all()}
    finally:
        db.close()

    count = 0
    # Blob is newest-first; insert oldest first so table order matches
    for record in reversed(source.list_all()):
        if record.id in existing:
            continue
        if target.append(record):
            count += 1
    return count


def main():
    print("\n=== Migrating Conversions ===")
    session_factory = get_session_factory()
    init_db()
    source = ConversionStore(JsonKeyStorage(CONVERSIONS_KEY))
    target = DatabaseConversionStore(session_factory)
    count = migrate_conversions(source, target, session_factory)
    print(f"✓ Migrated {count} conversions")


if __name__ == "__main__":
    main()
