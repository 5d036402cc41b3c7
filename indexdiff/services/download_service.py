"""Download, normalize and persist the records of divergent indices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from .normalize_service import normalize_records
from ..cache import ArtifactKey, BlobCache
from ..config import DEFAULT_PAGE_SIZE
from ..providers.algolia import ClientRegistry
from ..text import Messages


class DownloadStatus(str, Enum):
    CACHED = "cached"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclass(slots=True)
class DownloadOutcome:
    key: ArtifactKey
    status: DownloadStatus
    record_count: int | None = None
    error: str | None = None


ProgressCallback = Callable[[DownloadOutcome], None]


def expected_units(index_names: Sequence[str], accounts: Sequence[str]) -> int:
    return len(index_names) * len(accounts)


async def download_index(
    key: ArtifactKey,
    *,
    cache: BlobCache,
    clients: ClientRegistry,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> DownloadOutcome:
    """Persist the normalized records of one (index, account) pair.

    An existing artifact is never refreshed. Any failure while fetching or
    normalizing is written to the artifact as an error marker instead of
    being raised.
    """

    blob_key = key.blob_key
    if cache.exists(blob_key):
        return DownloadOutcome(key=key, status=DownloadStatus.CACHED)
    try:
        client = clients.get(key.account_name)
        records = await normalize_records(
            client.stream_all_records(key.index_name, page_size=page_size)
        )
    except Exception as exc:
        message = str(exc) or exc.__class__.__name__
        cache.write_raw(blob_key, Messages.ERROR_MARKER.format(message=message))
        return DownloadOutcome(key=key, status=DownloadStatus.FAILED, error=message)
    cache.write_json(blob_key, records)
    return DownloadOutcome(
        key=key,
        status=DownloadStatus.DOWNLOADED,
        record_count=len(records),
    )


async def download_divergent_indices(
    index_names: Sequence[str],
    *,
    accounts: Sequence[str],
    cache: BlobCache,
    clients: ClientRegistry,
    page_size: int = DEFAULT_PAGE_SIZE,
    on_progress: ProgressCallback | None = None,
) -> list[DownloadOutcome]:
    """Download every (index, account) pair one at a time.

    Both loops run with a concurrency of 1 to keep the load on the remote
    service predictable. Progress is reported once per pair.
    """

    outcomes: list[DownloadOutcome] = []
    for index_name in index_names:
        for account_name in accounts:
            outcome = await download_index(
                ArtifactKey(index_name=index_name, account_name=account_name),
                cache=cache,
                clients=clients,
                page_size=page_size,
            )
            outcomes.append(outcome)
            if on_progress is not None:
                on_progress(outcome)
    return outcomes
