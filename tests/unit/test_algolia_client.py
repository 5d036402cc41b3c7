from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

import pytest

from indexdiff.config import Account
from indexdiff.errors import ConfigError, RemoteError
from indexdiff.providers import algolia
from indexdiff.providers.algolia import AlgoliaIndexClient, ClientRegistry


class DummySearchClient:
    def __init__(self, pages=None, indices=None, fail_on_page=None):
        self.pages = list(pages or [])
        self.indices = indices or {"items": []}
        self.fail_on_page = fail_on_page
        self.browse_calls: list[dict] = []
        self.closed = False

    async def list_indices_with_http_info(self):
        return SimpleNamespace(raw_data=json.dumps(self.indices))

    async def browse_with_http_info(self, index_name, browse_params):
        self.browse_calls.append({"index_name": index_name, **browse_params})
        position = len(self.browse_calls) - 1
        if position == self.fail_on_page:
            raise RuntimeError("Unreachable hosts")
        return SimpleNamespace(raw_data=json.dumps(self.pages[position]))

    async def close(self):
        self.closed = True


ACCOUNT = Account("mesos", app_id="APP", api_key="KEY")


async def _drain(stream):
    return [record async for record in stream]


def test_list_indices_maps_remote_fields():
    dummy = DummySearchClient(
        indices={
            "items": [
                {
                    "name": "docs",
                    "entries": 3,
                    "dataSize": 120,
                    "fileSize": 300,
                    "updatedAt": "2026-10-01T00:00:00.000Z",
                    "createdAt": "2020-01-01T00:00:00.000Z",
                }
            ],
            "nbPages": 1,
        }
    )
    client = AlgoliaIndexClient(ACCOUNT, client=dummy)

    result = asyncio.run(client.list_indices())

    assert result == [
        {
            "name": "docs",
            "entries": 3,
            "dataSize": 120,
            "fileSize": 300,
            "updatedAt": "2026-10-01T00:00:00.000Z",
        }
    ]


def test_list_indices_wraps_errors():
    class Broken(DummySearchClient):
        async def list_indices_with_http_info(self):
            raise RuntimeError("Invalid Application-ID or API key")

    client = AlgoliaIndexClient(ACCOUNT, client=Broken())

    with pytest.raises(RemoteError) as exc:
        asyncio.run(client.list_indices())

    assert str(exc.value).startswith("Algolia request failed: ")
    assert "Invalid Application-ID" in str(exc.value)


def test_stream_all_records_follows_cursor_until_exhausted():
    dummy = DummySearchClient(
        pages=[
            {"hits": [{"objectID": "1"}, {"objectID": "2"}], "cursor": "c1"},
            {"hits": [{"objectID": "3"}], "cursor": "c2"},
            {"hits": [{"objectID": "4"}]},
        ]
    )
    client = AlgoliaIndexClient(ACCOUNT, client=dummy)

    records = asyncio.run(_drain(client.stream_all_records("docs", page_size=2)))

    assert [record["objectID"] for record in records] == ["1", "2", "3", "4"]
    assert [call.get("cursor") for call in dummy.browse_calls] == [None, "c1", "c2"]
    first = dummy.browse_calls[0]
    assert first["index_name"] == "docs"
    assert first["hitsPerPage"] == 2
    assert first["attributesToRetrieve"] == ["*"]
    assert first["distinct"] is False


def test_stream_all_records_defaults_to_thousand_per_page():
    dummy = DummySearchClient(pages=[{"hits": []}])
    client = AlgoliaIndexClient(ACCOUNT, client=dummy)

    assert asyncio.run(_drain(client.stream_all_records("docs"))) == []
    assert dummy.browse_calls[0]["hitsPerPage"] == 1000


def test_stream_all_records_surfaces_page_failure():
    dummy = DummySearchClient(
        pages=[{"hits": [{"objectID": "1"}], "cursor": "c1"}],
        fail_on_page=1,
    )
    client = AlgoliaIndexClient(ACCOUNT, client=dummy)

    with pytest.raises(RemoteError) as exc:
        asyncio.run(_drain(client.stream_all_records("docs")))

    assert "Unreachable hosts" in str(exc.value)


def test_client_requires_credentials():
    with pytest.raises(ConfigError):
        AlgoliaIndexClient(Account("mesos", app_id="APP"), client=DummySearchClient())


def test_client_builds_search_client_from_account(monkeypatch):
    created = {}

    def fake_search_client(app_id, api_key):
        created["args"] = (app_id, api_key)
        return DummySearchClient()

    monkeypatch.setattr(algolia, "SearchClient", fake_search_client)

    AlgoliaIndexClient(ACCOUNT)

    assert created["args"] == ("APP", "KEY")


def test_registry_memoizes_clients_per_account():
    created: list[str] = []

    def factory(account):
        created.append(account.name)
        return AlgoliaIndexClient(account, client=DummySearchClient())

    registry = ClientRegistry(
        [ACCOUNT, Account("kubernetes", app_id="APP2", api_key="KEY2")],
        factory=factory,
    )

    first = registry.get("mesos")
    second = registry.get("mesos")
    other = registry.get("kubernetes")

    assert first is second
    assert other is not first
    assert created == ["mesos", "kubernetes"]
    assert registry.account_names == ("mesos", "kubernetes")


def test_registry_rejects_unknown_or_incomplete_accounts():
    registry = ClientRegistry([Account("mesos")], factory=lambda account: None)

    with pytest.raises(ConfigError):
        registry.get("kubernetes")
    with pytest.raises(ConfigError):
        registry.get("mesos")


def test_registry_aclose_closes_created_clients():
    dummy = DummySearchClient()
    registry = ClientRegistry(
        [ACCOUNT],
        factory=lambda account: AlgoliaIndexClient(account, client=dummy),
    )
    registry.get("mesos")

    asyncio.run(registry.aclose())

    assert dummy.closed is True
