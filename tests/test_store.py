"""Tests for the word count store."""
import asyncio
from contextlib import nullcontext
from types import SimpleNamespace

import pytest
from sqlalchemy import text

from wordcount.models import WordCount
from wordcount.store import (
    StoreError,
    StoreInitializationError,
    StoreNotReadyError,
    WordCountStore,
)


def db_url(tmp_path, name="words.db"):
    return f"sqlite+aiosqlite:///{tmp_path / name}"


def run(tmp_path, scenario):
    """Run ``scenario(store)`` against a freshly initialized store."""
    async def main():
        store = WordCountStore.from_url(db_url(tmp_path))
        try:
            await store.initialize()
            return await scenario(store)
        finally:
            await store.close()

    return asyncio.run(main())


def test_first_observation_counts_one(tmp_path):
    async def scenario(store):
        await store.record("hello")
        return await store.fetch_one("hello")

    assert run(tmp_path, scenario) == WordCount(word="hello", count=1)


def test_sequential_observations(tmp_path):
    async def scenario(store):
        for _ in range(7):
            await store.record("again")
        return await store.fetch_one("again")

    assert run(tmp_path, scenario).count == 7


def test_concurrent_observations_are_not_lost(tmp_path):
    async def scenario(store):
        await asyncio.gather(*(store.record("race") for _ in range(300)))
        return await store.fetch_all()

    assert run(tmp_path, scenario) == [WordCount(word="race", count=300)]


def test_concurrent_observations_across_engines(tmp_path):
    """Two stores on one database file, as two processes would share it."""
    async def main():
        first = WordCountStore.from_url(db_url(tmp_path))
        second = WordCountStore.from_url(db_url(tmp_path))
        try:
            await first.initialize()
            await second.initialize()
            await asyncio.gather(
                *(store.record("shared") for store in (first, second) for _ in range(50))
            )
            return await first.fetch_one("shared")
        finally:
            await first.close()
            await second.close()

    assert asyncio.run(main()).count == 100


def test_concurrent_mixed_words(tmp_path):
    async def scenario(store):
        words = ["a", "b", "c"] * 40
        await asyncio.gather(*(store.record(w) for w in words))
        return await store.fetch_all()

    counts = {wc.word: wc.count for wc in run(tmp_path, scenario)}
    assert counts == {"a": 40, "b": 40, "c": 40}


def test_unknown_word_is_not_found(tmp_path):
    async def scenario(store):
        await store.record("known")
        return await store.fetch_one("unknown")

    assert run(tmp_path, scenario) is None


def test_fetch_all_on_empty_store(tmp_path):
    async def scenario(store):
        return await store.fetch_all()

    assert run(tmp_path, scenario) == []


def test_fetch_all_returns_every_word(tmp_path):
    async def scenario(store):
        await store.record("a")
        await store.record("b")
        await store.record("a")
        return await store.fetch_all()

    result = sorted(run(tmp_path, scenario), key=lambda wc: wc.word)
    assert result == [WordCount(word="a", count=2), WordCount(word="b", count=1)]


def test_words_are_opaque(tmp_path):
    async def scenario(store):
        for word in ["Word", "word", " word", "word"]:
            await store.record(word)
        return await store.fetch_all()

    counts = {wc.word: wc.count for wc in run(tmp_path, scenario)}
    assert counts == {"Word": 1, "word": 2, " word": 1}


def test_initialize_again_wipes_counts(tmp_path):
    async def scenario(store):
        for _ in range(5):
            await store.record("gone")
        assert (await store.fetch_one("gone")).count == 5
        await store.initialize()
        return await store.fetch_one("gone"), await store.fetch_all()

    assert run(tmp_path, scenario) == (None, [])


def test_initialize_discards_previous_run(tmp_path):
    run(tmp_path, lambda store: store.record("old"))

    async def scenario(store):
        return await store.fetch_all()

    assert run(tmp_path, scenario) == []


@pytest.mark.parametrize("word", ["", None, 42])
def test_record_rejects_invalid_word(tmp_path, word):
    async def scenario(store):
        with pytest.raises(ValueError):
            await store.record(word)
        return await store.fetch_all()

    assert run(tmp_path, scenario) == []


def test_operations_require_initialize(tmp_path):
    async def main():
        store = WordCountStore.from_url(db_url(tmp_path))
        try:
            assert not store.ready
            with pytest.raises(StoreNotReadyError):
                await store.record("early")
            with pytest.raises(StoreNotReadyError):
                await store.fetch_one("early")
            with pytest.raises(StoreNotReadyError):
                await store.fetch_all()
        finally:
            await store.close()

    asyncio.run(main())


def test_initialize_failure_is_raised(tmp_path):
    async def main():
        store = WordCountStore.from_url(db_url(tmp_path / "missing" / "dir"))
        try:
            with pytest.raises(StoreInitializationError):
                await store.initialize()
            assert not store.ready
        finally:
            await store.close()

    asyncio.run(main())


def test_runtime_failure_is_store_error(tmp_path):
    async def scenario(store):
        async with store.engine.begin() as conn:
            await conn.execute(text("DROP TABLE words"))

        with pytest.raises(StoreError) as excinfo:
            await store.record("lost")
        assert excinfo.value.__cause__ is not None

        with pytest.raises(StoreError):
            await store.fetch_one("lost")
        with pytest.raises(StoreError):
            await store.fetch_all()

    run(tmp_path, scenario)


def test_unsupported_dialect():
    engine = SimpleNamespace(dialect=SimpleNamespace(name="oracle"))
    with pytest.raises(StoreError, match="oracle"):
        WordCountStore(engine)


def test_postgresql_writes_are_not_serialized():
    engine = SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))
    store = WordCountStore(engine)
    assert isinstance(store._writer(), nullcontext)


def test_sqlite_writes_share_one_lock(tmp_path):
    store = WordCountStore.from_url(db_url(tmp_path))
    assert isinstance(store._writer(), asyncio.Lock)
    assert store._writer() is store._writer()
