"""
Tests for the key-value storage backends.
"""

import pytest
from unittest.mock import patch

from interviewiq.common.config import StorageConfig
from interviewiq.common.error_handling import StorageError
from interviewiq.storage.factory import create_store
from interviewiq.storage.file_store import JsonFileStore
from interviewiq.storage.memory import MemoryStore
from interviewiq.storage.sql_store import SQLAlchemyStore


@pytest.fixture(params=["memory", "file", "sql"])
def kv_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    if request.param == "file":
        return JsonFileStore(str(tmp_path / "data"))
    return SQLAlchemyStore(f"sqlite:///{tmp_path / 'kv.db'}")


@pytest.mark.asyncio
async def test_put_get_delete(kv_store):
    record = {"id": "s1", "answers": [{"questionId": 1}], "totalScore": 10}

    assert await kv_store.get("session:s1") is None
    await kv_store.put("session:s1", record)
    assert await kv_store.get("session:s1") == record

    await kv_store.put("session:s1", {"id": "s1", "totalScore": 20})
    assert (await kv_store.get("session:s1"))["totalScore"] == 20

    assert await kv_store.delete("session:s1")
    assert not await kv_store.delete("session:s1")
    assert await kv_store.get("session:s1") is None
    await kv_store.close()


@pytest.mark.asyncio
async def test_values_are_copies(kv_store):
    value = {"items": [1]}
    await kv_store.put("list", value)

    value["items"].append(2)
    loaded = await kv_store.get("list")
    loaded["items"].append(3)

    assert await kv_store.get("list") == {"items": [1]}
    await kv_store.close()


@pytest.mark.asyncio
async def test_non_json_value_raises_storage_error(kv_store):
    with pytest.raises(StorageError):
        await kv_store.put("bad", {"value": object()})
    await kv_store.close()


@pytest.mark.asyncio
async def test_file_store_persists_across_instances(tmp_path):
    await JsonFileStore(str(tmp_path)).put("progress:a@x.io", {"userId": "a@x.io"})

    reopened = JsonFileStore(str(tmp_path))

    assert await reopened.get("progress:a@x.io") == {"userId": "a@x.io"}
    assert reopened.path_for("progress:a@x.io").parent == tmp_path
    assert "/" not in reopened.path_for("a/b").name


@pytest.mark.asyncio
async def test_file_store_corrupt_file_raises(tmp_path):
    store = JsonFileStore(str(tmp_path))
    store.path_for("broken").write_text("{not json")

    with pytest.raises(StorageError):
        await store.get("broken")


@pytest.mark.asyncio
async def test_file_store_failed_write_leaves_no_temp_file(tmp_path):
    store = JsonFileStore(str(tmp_path))

    with patch("interviewiq.storage.file_store.os.replace", side_effect=OSError("read-only")):
        with pytest.raises(StorageError):
            await store.put("session:s1", {"id": "s1"})

    assert list(tmp_path.iterdir()) == []
    assert await store.get("session:s1") is None


@pytest.mark.asyncio
async def test_sql_store_persists_across_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'kv.db'}"
    first = SQLAlchemyStore(url)
    await first.put("login_history", [{"id": "login_1"}])
    await first.close()

    second = SQLAlchemyStore(url)
    assert await second.get("login_history") == [{"id": "login_1"}]
    await second.close()


@pytest.mark.parametrize("backend, expected", [("memory", "memory"), ("file", "file"), ("sql", "sql")])
def test_factory_builds_configured_backend(tmp_path, backend, expected):
    config = StorageConfig(
        backend=backend,
        data_dir=str(tmp_path / "files"),
        database_url=f"sqlite:///{tmp_path / 'nested' / 'kv.db'}",
    )

    assert create_store(config).name == expected


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        StorageConfig(backend="redis")
