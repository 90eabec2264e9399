"""Database session management for async SQLAlchemy.

Provides the shared engine, the session maker used by the SQL record
store, and table creation/seeding helpers.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel, select

from formflow.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


# Global engine and session maker
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


DEMO_FORM_ID = "form2_demo"
DEMO_FORM_SECTIONS = [
    {
        "id": "contact",
        "title": "Contact",
        "fields": [
            {"id": "f1", "stableId": "item_email", "label": "Email Address", "type": "email"},
            {"id": "f2", "stableId": "item_first", "label": "First Name", "type": "text"},
            {"id": "f3", "stableId": "item_last", "label": "Last Name", "type": "text"},
            {"id": "f4", "label": "Company", "type": "text", "mapping": "company"},
        ],
    }
]


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the async database engine.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async SQLAlchemy engine.
    """
    global _engine

    try:
        if _engine is None:
            settings = settings or get_settings()

            logger.info(f"Creating async database engine: {settings.database_url}")

            engine_kwargs: dict = {
                "echo": settings.log_level == "DEBUG",
                "future": True,
                "pool_pre_ping": True,
            }
            # SQLite (used in local runs) does not take pool sizing arguments
            if not settings.database_url.startswith("sqlite"):
                engine_kwargs.update(pool_size=10, max_overflow=20)

            _engine = create_async_engine(settings.database_url, **engine_kwargs)

            logger.info("Database engine created successfully")

        return _engine

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session maker.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async session maker.
    """
    global _async_session_maker

    try:
        if _async_session_maker is None:
            engine = get_engine(settings)

            _async_session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            logger.info("Session maker created successfully")

        return _async_session_maker

    except Exception as e:
        logger.error(f"Failed to create session maker: {e}", exc_info=True)
        raise


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create all database tables.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        # Import models to ensure they're registered with SQLModel metadata
        from formflow.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.info("Creating database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise


async def drop_all_tables(settings: Settings | None = None) -> None:
    """Drop all database tables.

    WARNING: This will delete all data.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from formflow.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.warning("Dropping all database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)

        logger.warning("All database tables dropped")

    except Exception as e:
        logger.error(f"Failed to drop database tables: {e}", exc_info=True)
        raise


async def init_db(settings: Settings | None = None) -> None:
    """Initialize the database.

    Creates tables and seeds a demo form with one email rule when the
    forms table is empty.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from formflow.db.models import EmailRule, Form

        await create_all_tables(settings)

        session_maker = get_session_maker(settings)
        async with session_maker() as session:
            try:
                result = await session.execute(select(Form).limit(1))
                form_exists = result.scalars().first() is not None

                if not form_exists:
                    logger.info("Seeding demo form...")

                    session.add(Form(id=DEMO_FORM_ID, name="Demo Contact Form", sections=DEMO_FORM_SECTIONS))
                    session.add(
                        EmailRule(
                            id="rule_demo_welcome",
                            form_id=DEMO_FORM_ID,
                            name="Welcome email",
                            recipient_template="{{item_email}}",
                            subject_template="Welcome {{firstName}}",
                            body_template="Hi {{firstName}} {{lastName}} from {{company}}. Ref {{trackingToken}}",
                        )
                    )
                    await session.commit()

                    logger.info(f"Created demo form: {DEMO_FORM_ID}")

            except Exception as e:
                logger.error(f"Error seeding initial data: {e}", exc_info=True)
                await session.rollback()
                raise

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


async def close_db() -> None:
    """Close the database engine and all connections."""
    global _engine, _async_session_maker

    try:
        if _engine is not None:
            logger.info("Closing database engine...")
            await _engine.dispose()
            _engine = None
            _async_session_maker = None
            logger.info("Database engine closed")

    except Exception as e:
        logger.error(f"Error closing database engine: {e}", exc_info=True)
        raise
