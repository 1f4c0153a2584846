"""
Database Connection and Session Management.

This module sets up the asynchronous SQLAlchemy engine and session factory.
"""

from intent_router.agent_core.repos.sql import create_all, create_engine, create_sessionmaker
from intent_router.server.core.config import settings

"""
engine:
    The global SQLAlchemy AsyncEngine instance, configured with the connection
    URL from settings.
"""
engine = create_engine(settings.database_url)

"""
async_session_maker:
    A global factory for creating new AsyncSession instances.
    Bound to the `engine` and configured to NOT expire on commit.
"""
async_session_maker = create_sessionmaker(engine)


async def init_db() -> None:
    """
    Initialize the database.

    Creates all tables defined in the agent_core ORM metadata.
    NOTE: In production, Alembic migrations should be used instead of this function.
    """
    await create_all(engine)
