"""Tests for LocalStore."""
import pytest
from unittest.mock import AsyncMock, MagicMock


def _store(doc):
    from app.stores.local_store import LocalStore

    mock_db = MagicMock()
    mock_kv = AsyncMock()
    mock_db.__getitem__.return_value = mock_kv
    mock_kv.find_one.return_value = doc
    return LocalStore(mock_db), mock_kv


@pytest.mark.asyncio
class TestLocalStore:
    """Tests for the Motor-backed key-value cache."""

    async def test_get_missing_key(self):
        store, mock_kv = _store(None)

        assert await store.get("work_logs") is None
        mock_kv.find_one.assert_awaited_once_with({"_id": "work_logs"})

    async def test_set_upserts(self):
        store, mock_kv = _store(None)

        await store.set("hourly_rate", 250)

        args, kwargs = mock_kv.update_one.call_args
        assert args[0] == {"_id": "hourly_rate"}
        assert args[1]["$set"]["value"] == 250
        assert kwargs["upsert"] is True

    async def test_load_session(self):
        store, _ = _store({
            "_id": "active_session",
            "value": {
                "status": "working",
                "startTime": 1_780_000_000_000,
                "breakStartTime": None,
                "accumulatedBreakTime": 0,
            },
        })

        session = await store.load_session()

        assert session.status.value == "working"
        assert session.start_time == 1_780_000_000_000

    async def test_corrupt_session_is_absent(self):
        store, _ = _store({"_id": "active_session", "value": {"status": "working"}})

        assert await store.load_session() is None

    async def test_corrupt_logs_are_empty(self):
        store, _ = _store({"_id": "work_logs", "value": [{"id": "x"}]})

        assert await store.load_logs() == []

    async def test_non_list_logs_are_empty(self):
        store, _ = _store({"_id": "work_logs", "value": "garbage"})

        assert await store.load_logs() == []

    async def test_clearing_session_deletes_key(self):
        store, mock_kv = _store(None)

        await store.save_session(None)

        mock_kv.delete_one.assert_awaited_once_with({"_id": "active_session"})
        mock_kv.update_one.assert_not_awaited()
