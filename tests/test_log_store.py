"""Tests for the file-based log store."""

import asyncio

import pytest

from uptime_worker.core.errors import CompressionError, TruncateError

from fakes import CHECK_ID


@pytest.mark.unit
class TestLogStore:
    """Test append, list, compress and truncate."""

    async def test_append_creates_and_extends_log(self, log_store):
        await log_store.append(CHECK_ID, '{"a": 1}')
        await log_store.append(CHECK_ID, '{"a": 2}')

        assert await log_store.read(CHECK_ID) == '{"a": 1}\n{"a": 2}\n'

    async def test_read_missing_log_is_empty(self, log_store):
        assert await log_store.read(CHECK_ID) == ""

    async def test_list_active_and_archived(self, log_store):
        await log_store.append("first", "line")
        await log_store.append("second", "line")
        await log_store.compress("first", "first-1000")

        assert await log_store.list() == ["first", "second"]
        assert await log_store.list(include_archived=True) == ["first", "first-1000", "second"]

    async def test_list_without_directory(self, log_store):
        assert await log_store.list(include_archived=True) == []

    async def test_compress_then_truncate(self, log_store):
        await log_store.append(CHECK_ID, "one")
        await log_store.append(CHECK_ID, "two")
        before = await log_store.read(CHECK_ID)

        await log_store.compress(CHECK_ID, f"{CHECK_ID}-1")
        await log_store.truncate(CHECK_ID)

        assert await log_store.read(CHECK_ID) == ""
        assert await log_store.decompress(f"{CHECK_ID}-1") == before
        assert CHECK_ID in await log_store.list()

    async def test_archive_is_never_overwritten(self, log_store):
        await log_store.append(CHECK_ID, "one")
        await log_store.compress(CHECK_ID, "archive")

        with pytest.raises(CompressionError):
            await log_store.compress(CHECK_ID, "archive")

    async def test_compress_missing_log(self, log_store):
        with pytest.raises(CompressionError):
            await log_store.compress("missing", "missing-1")

    async def test_decompress_missing_archive(self, log_store):
        with pytest.raises(CompressionError):
            await log_store.decompress("missing-1")

    async def test_truncate_missing_log(self, log_store):
        with pytest.raises(TruncateError):
            await log_store.truncate("missing")

    async def test_lock_is_per_log(self, log_store):
        assert log_store.lock("a") is log_store.lock("a")
        assert log_store.lock("a") is not log_store.lock("b")

    async def test_append_waits_for_lock(self, log_store):
        async with log_store.lock(CHECK_ID):
            append = asyncio.create_task(log_store.append(CHECK_ID, "waiting"))
            await asyncio.sleep(0.05)
            assert not append.done()
            assert await log_store.read(CHECK_ID) == ""

        await append
        assert await log_store.read(CHECK_ID) == "waiting\n"
