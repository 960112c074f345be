"""Persistent, concurrency-safe word occurrence counts."""
import asyncio
import logging
from contextlib import nullcontext
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from wordcount.database import Base, create_engine, create_session_maker
from wordcount.models import Word, WordCount

logger = logging.getLogger(__name__)

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class StoreError(Exception):
    """Raised when the underlying storage fails."""


class StoreInitializationError(StoreError):
    """Raised when the schema or connection cannot be set up."""


class StoreNotReadyError(StoreError):
    """Raised when an operation is attempted before initialize() succeeded."""


class WordCountStore:
    """Word -> count table with atomic upsert-increment.

    One instance is built by the application at startup and shared by all
    request handlers. ``initialize()`` must complete before any other
    operation is accepted.
    """

    def __init__(self, engine: AsyncEngine):
        dialect = engine.dialect.name
        if dialect not in UPSERT_DIALECTS:
            raise StoreError(f"Unsupported database dialect: {dialect}")

        self.engine = engine
        self._insert = UPSERT_DIALECTS[dialect]
        self._session_maker = create_session_maker(engine)
        # SQLite allows a single writer per database file
        self._write_lock = asyncio.Lock() if dialect == "sqlite" else None
        self._ready = False

    @classmethod
    def from_url(cls, database_url: str, timeout: float = 30.0, echo: bool = False) -> "WordCountStore":
        """Create a store with its own engine for ``database_url``."""
        return cls(create_engine(database_url, timeout=timeout, echo=echo))

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        """Connect, then drop and recreate the words table on one connection.

        The DDL is not wrapped in a single transaction on SQLite, but the
        empty table is visible to every connection once this returns. Any
        data left from a previous run is discarded. Raises
        StoreInitializationError if the database cannot be set up; the
        caller decides whether that aborts startup.
        """
        self._ready = False
        tables = [Word.__table__]
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all, tables=tables)
                await conn.run_sync(Base.metadata.create_all, tables=tables)
        except SQLAlchemyError as exc:
            logger.error("Word store initialization failed: %s", exc)
            raise StoreInitializationError(f"Could not initialize word store: {exc}") from exc

        self._ready = True
        logger.info("Word store initialized (%s)", self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        """Release all pooled connections."""
        await self.engine.dispose()

    async def record(self, word: str) -> None:
        """Record one observation of ``word``.

        Inserts the word with count 1, or adds 1 to its count, in a single
        INSERT ... ON CONFLICT DO UPDATE statement. Concurrent calls for the
        same word never lose an increment.
        """
        if not isinstance(word, str) or not word:
            raise ValueError("word must be a non-empty string")
        self._ensure_ready()

        stmt = self._insert(Word).values(word=word, count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Word.word],
            set_={"count": Word.count + 1},
        )

        async with self._writer():
            try:
                async with self._session_maker() as session:
                    async with session.begin():
                        await session.execute(stmt)
            except SQLAlchemyError as exc:
                logger.exception("Failed to record word %r", word)
                raise StoreError(f"Could not record word {word!r}") from exc

        logger.debug("Recorded word %r", word)

    async def fetch_one(self, word: str) -> Optional[WordCount]:
        """Return the count for ``word``, or None if it was never observed."""
        self._ensure_ready()
        try:
            async with self._session_maker() as session:
                result = await session.execute(select(Word).where(Word.word == word))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch word %r", word)
            raise StoreError(f"Could not fetch word {word!r}") from exc

        if row is None:
            return None
        return WordCount.from_row(row)

    async def fetch_all(self) -> List[WordCount]:
        """Return every stored word count, in no particular order."""
        self._ensure_ready()
        try:
            async with self._session_maker() as session:
                result = await session.execute(select(Word))
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch words")
            raise StoreError("Could not fetch words") from exc

        return [WordCount.from_row(row) for row in rows]

    def _writer(self):
        if self._write_lock is None:
            return nullcontext()
        return self._write_lock

    def _ensure_ready(self) -> None:
        if not self._ready:
            raise StoreNotReadyError("Word store has not been initialized")
