from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from indexdiff.errors import RemoteError
from indexdiff.services.index_list_service import (
    IndexSummary,
    fetch_index_list,
    find_stale_indices,
)


def test_fetch_index_list_filters_temp_indices_and_persists(
    blob_cache, fake_client, registry_factory, entry_factory
):
    client = fake_client(
        indices=[
            entry_factory("docs", 100, entries=4),
            entry_factory("docs_tmp", 5),
            entry_factory("blog", 50),
        ]
    )
    registry = registry_factory({"mesos": client})

    result = asyncio.run(fetch_index_list("mesos", cache=blob_cache, clients=registry))

    assert [summary.name for summary in result] == ["docs", "blog"]
    assert result[0] == IndexSummary(
        name="docs",
        record_count=4,
        data_size=100,
        file_size=200,
        last_update="2026-10-01T00:00:00.000Z",
    )
    stored = blob_cache.read_json("apps/mesos.json")
    assert stored[0] == {
        "name": "docs",
        "recordCount": 4,
        "dataSize": 100,
        "fileSize": 200,
        "lastUpdate": "2026-10-01T00:00:00.000Z",
    }
    assert [entry["name"] for entry in stored] == ["docs", "blog"]


def test_fetch_index_list_is_served_from_cache_on_second_call(
    blob_cache, fake_client, registry_factory, entry_factory
):
    client = fake_client(indices=[entry_factory("docs", 100)])
    registry = registry_factory({"mesos": client})

    first = asyncio.run(fetch_index_list("mesos", cache=blob_cache, clients=registry))
    client.indices = [entry_factory("docs", 999)]
    second = asyncio.run(fetch_index_list("mesos", cache=blob_cache, clients=registry))

    assert client.list_calls == 1
    assert second == first


def test_fetch_index_list_reports_cache_events(
    blob_cache, fake_client, registry_factory, entry_factory
):
    registry = registry_factory({"mesos": fake_client(indices=[entry_factory("docs", 1)])})
    events: list[str] = []

    asyncio.run(
        fetch_index_list("mesos", cache=blob_cache, clients=registry, on_event=events.append)
    )
    asyncio.run(
        fetch_index_list("mesos", cache=blob_cache, clients=registry, on_event=events.append)
    )

    assert "Saving list of indices for mesos" in events[0]
    assert "found in cache" in events[1]


def test_fetch_index_list_custom_temp_suffix(
    blob_cache, fake_client, registry_factory, entry_factory
):
    registry = registry_factory(
        {"mesos": fake_client(indices=[entry_factory("docs.old", 1), entry_factory("docs_tmp", 1)])}
    )

    result = asyncio.run(
        fetch_index_list("mesos", cache=blob_cache, clients=registry, temp_suffix=".old")
    )

    assert [summary.name for summary in result] == ["docs_tmp"]


def test_fetch_index_list_propagates_remote_errors(blob_cache, registry_factory):
    class Failing:
        async def list_indices(self):
            raise RemoteError("Algolia request failed: forbidden")

    registry = registry_factory({"mesos": Failing()})

    with pytest.raises(RemoteError):
        asyncio.run(fetch_index_list("mesos", cache=blob_cache, clients=registry))
    assert blob_cache.exists("apps/mesos.json") is False


NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def test_find_stale_indices_sorts_by_name_and_applies_threshold():
    summaries = [
        IndexSummary("zeta", last_update="2026-08-01T00:00:00.000Z"),
        IndexSummary("fresh", last_update="2026-10-18T12:00:00Z"),
        IndexSummary("alpha", last_update="2026-09-19T00:00:00+00:00"),
        IndexSummary("edge", last_update="2026-09-20T00:00:01Z"),
    ]

    stale = find_stale_indices(summaries, days=30, now=NOW)

    assert [summary.name for summary in stale] == ["alpha", "zeta"]


def test_find_stale_indices_treats_unknown_timestamps_as_stale():
    summaries = [IndexSummary("none"), IndexSummary("garbage", last_update="yesterday")]

    stale = find_stale_indices(summaries, days=1, now=NOW)

    assert [summary.name for summary in stale] == ["garbage", "none"]
