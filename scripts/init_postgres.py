"""
Initialize the SQL schema for the database-backed conversion store
Creates the postback_conversions table
"""
import sys
import os

# Add parent directory to path to import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import engine, init_db


def init_database():
    """Create all tables in the database"""
    if engine is None:
        print("✗ DATABASE_URL is not set")
        sys.exit(1)

    print("Creating tables...")
    try:
        init_db()
        print("✓ Tables created successfully!")
        print("\nCreated tables:")
        print("  - postback_conversions")
    except Exception as e:
        print(f"✗ Error creating tables: {e}")
        sys.exit(1)


if __name__ == "__main__":
    init_database()
