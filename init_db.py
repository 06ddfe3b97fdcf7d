#!/usr/bin/env python3
"""
Database Initialization Script

Creates the database tables directly from the SQLAlchemy models.
"""
import asyncio
import sys

from medchat.infrastructure.config import get_settings
from medchat.infrastructure.adapters.database.connection import DatabaseManager
from medchat.infrastructure.adapters.database.base import Base


async def init_database(drop_existing: bool = False) -> bool:
    """Initialize database with all required tables."""
    print("Initializing database...")

    settings = get_settings()
    db_manager = DatabaseManager(settings.database)

    try:
        if drop_existing:
            print("Dropping existing tables...")
            await db_manager.drop_tables()

        print("Creating database tables...")
        await db_manager.create_tables()

        print("Testing database connectivity...")
        if not await db_manager.health_check():
            print("Database connectivity test failed")
            return False

        print("\nTables:")
        for table_name in Base.metadata.tables.keys():
            print(f"  - {table_name}")

        return True

    except Exception as e:
        print(f"Error initializing database: {str(e)}")
        return False

    finally:
        await db_manager.close()


def main():
    """Main entry point."""
    print("MedChat Database Initialization")
    print("=" * 40)

    success = asyncio.run(init_database(drop_existing="--drop" in sys.argv[1:]))

    if success:
        print("\nDatabase initialization completed.")
        sys.exit(0)
    else:
        print("\nDatabase initialization failed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
