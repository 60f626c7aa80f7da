#!/usr/bin/env python3
"""
Database initialization script to create all tables.
Run this script to create missing tables and seed the default organizations.
"""

import asyncio

from sqlalchemy import text

from app.db.models import Base
from app.db import crud
from app.config import engine, AsyncSessionLocal

TABLES_TO_CHECK = [
    'organizations',
    'comparison_documents',
    'comparison_results'
]

async def init_db():
    """Create all tables defined in the models."""
    try:
        print("Creating database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        print("✅ Database tables created successfully!")

        async with engine.begin() as conn:
            for table_name in TABLES_TO_CHECK:
                result = await conn.execute(text("""
                    SELECT EXISTS (
                        SELECT FROM information_schema.tables
                        WHERE table_schema = 'public'
                        AND table_name = :table_name
                    );
                """), {"table_name": table_name})

                if result.scalar():
                    print(f"✅ {table_name} table exists!")
                else:
                    print(f"❌ {table_name} table was not created!")

        async with AsyncSessionLocal() as db:
            organizations = await crud.initialize_default_organizations(db)
            print(f"🏢 {len(organizations)} organizations available")

    except Exception as e:
        print(f"❌ Error creating database tables: {e}")
        raise

if __name__ == "__main__":
    print("🚀 Initializing database...")
    asyncio.run(init_db())
    print("✨ Database initialization complete!")
