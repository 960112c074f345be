"""Database engine and session construction."""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

# Base class for models
Base = declarative_base()


def create_engine(database_url: str, timeout: float = 30.0, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL.

    SQLite connections get a busy timeout so a writer waits for the lock
    held by another connection instead of failing with "database is locked".
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["timeout"] = timeout

    return create_async_engine(
        database_url,
        echo=echo,  # Set to True for SQL query logging
        connect_args=connect_args,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
