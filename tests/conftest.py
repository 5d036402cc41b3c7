"""Shared fakes for indexdiff tests."""

from __future__ import annotations

import pytest

from indexdiff.cache import BlobCache
from indexdiff.config import Account
from indexdiff.errors import RemoteError
from indexdiff.providers.algolia import ClientRegistry


class FakeIndexClient:
    """In-memory stand-in for AlgoliaIndexClient."""

    def __init__(self, indices=None, records=None, failures=None):
        self.indices = list(indices or [])
        self.records = dict(records or {})
        self.failures = dict(failures or {})
        self.list_calls = 0
        self.stream_calls: list[str] = []
        self.closed = False

    async def list_indices(self):
        self.list_calls += 1
        return [dict(entry) for entry in self.indices]

    async def stream_all_records(self, index_name, *, page_size=1000):
        self.stream_calls.append(index_name)
        for record in self.records.get(index_name, []):
            yield dict(record)
        if index_name in self.failures:
            raise RemoteError(self.failures[index_name])

    async def close(self):
        self.closed = True


def make_registry(clients: dict[str, FakeIndexClient]) -> ClientRegistry:
    accounts = [Account(name, app_id=f"{name}-app", api_key="secret") for name in clients]
    return ClientRegistry(accounts, factory=lambda account: clients[account.name])


def index_entry(name: str, data_size: int, *, entries: int = 1, updated_at: str = "2026-10-01T00:00:00.000Z"):
    return {
        "name": name,
        "entries": entries,
        "dataSize": data_size,
        "fileSize": data_size * 2,
        "updatedAt": updated_at,
    }


@pytest.fixture
def fake_client():
    return FakeIndexClient


@pytest.fixture
def registry_factory():
    return make_registry


@pytest.fixture
def entry_factory():
    return index_entry


@pytest.fixture
def blob_cache(tmp_path):
    return BlobCache(tmp_path / "dist")
