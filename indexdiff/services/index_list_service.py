"""Fetch, cache and inspect the list of indices of one account."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence

from ..cache import BlobCache, index_list_key
from ..config import DEFAULT_STALE_DAYS, DEFAULT_TEMP_SUFFIX
from ..providers.algolia import ClientRegistry
from ..text import Messages


@dataclass(frozen=True, slots=True)
class IndexSummary:
    name: str
    record_count: int = 0
    data_size: int = 0
    file_size: int = 0
    last_update: str | None = None

    @classmethod
    def from_remote(cls, entry: Mapping[str, Any]) -> "IndexSummary":
        return cls(
            name=str(entry.get("name") or ""),
            record_count=int(entry.get("entries") or 0),
            data_size=int(entry.get("dataSize") or 0),
            file_size=int(entry.get("fileSize") or 0),
            last_update=entry.get("updatedAt"),
        )

    @classmethod
    def from_cache(cls, entry: Mapping[str, Any]) -> "IndexSummary":
        return cls(
            name=str(entry.get("name") or ""),
            record_count=int(entry.get("recordCount") or 0),
            data_size=int(entry.get("dataSize") or 0),
            file_size=int(entry.get("fileSize") or 0),
            last_update=entry.get("lastUpdate"),
        )

    def to_cache(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "recordCount": self.record_count,
            "dataSize": self.data_size,
            "fileSize": self.file_size,
            "lastUpdate": self.last_update,
        }


async def fetch_index_list(
    account_name: str,
    *,
    cache: BlobCache,
    clients: ClientRegistry,
    temp_suffix: str = DEFAULT_TEMP_SUFFIX,
    on_event: Callable[[str], None] | None = None,
) -> list[IndexSummary]:
    """Return the index list of *account_name*, from cache when available.

    A cached list is trusted indefinitely. A fresh list keeps the order of the
    remote service, minus temporary indices, and is persisted before being
    returned. Remote failures propagate.
    """

    key = index_list_key(account_name)
    if cache.exists(key):
        if on_event is not None:
            on_event(Messages.INFO_LIST_CACHED.format(account=account_name))
        return [IndexSummary.from_cache(entry) for entry in cache.read_json(key)]

    entries = await clients.get(account_name).list_indices()
    summaries = [
        summary
        for summary in (IndexSummary.from_remote(entry) for entry in entries)
        if not summary.name.endswith(temp_suffix)
    ]
    if on_event is not None:
        on_event(Messages.INFO_LIST_SAVED.format(account=account_name))
    cache.write_json(key, [summary.to_cache() for summary in summaries])
    return summaries


def find_stale_indices(
    summaries: Sequence[IndexSummary],
    *,
    days: int = DEFAULT_STALE_DAYS,
    now: datetime | None = None,
) -> list[IndexSummary]:
    """Return indices whose last update is at least *days* old, sorted by name.

    Note: this is not very reliable for crawler-managed indices, as even
    failed crawls touch the update timestamp.
    """

    reference = now or datetime.now(timezone.utc)
    stale: list[IndexSummary] = []
    for summary in sorted(summaries, key=lambda item: item.name):
        updated = _parse_timestamp(summary.last_update)
        if updated is None or (reference - updated).days >= days:
            stale.append(summary)
    return stale


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
