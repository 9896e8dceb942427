"""
Database initialization script

Run this script to create all database tables.
Usage: python init_db.py [--drop] [--seed]
"""
import argparse
import asyncio
import logging
from app.core.config import settings
from app.core.database import engine, Base, AsyncSessionLocal
from app.core.logging import setup_logging
from app.models import Application, ApplicationRequirement, Document, RequirementsTemplate, Task, User
from app.services.requirements_template_service import RequirementsTemplateService

logger = logging.getLogger("app.init_db")


async def init_database():
    """Create all database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created: %s", ", ".join(sorted(Base.metadata.tables)))


async def drop_database():
    """Drop all database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.info("Database tables dropped")


async def seed_templates():
    """Insert the built-in requirements templates if they are missing"""
    async with AsyncSessionLocal() as session:
        created = await RequirementsTemplateService(session).create_system_templates()
        await session.commit()

    logger.info("System templates created: %s", len(created))


async def main(drop: bool, seed: bool):
    if drop:
        await drop_database()
    await init_database()
    if seed:
        await seed_templates()
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the requirements tracker database")
    parser.add_argument("--drop", action="store_true", help="drop all tables before creating them")
    parser.add_argument("--seed", action="store_true", help="insert the built-in requirements templates")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    asyncio.run(main(args.drop, args.seed))
