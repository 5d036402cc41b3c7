"""Public Python API for indexdiff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable

from .cache import BlobCache
from .config import Config, load_config, require_credentials, resolve_account, resolve_accounts
from .errors import ConfigError, IndexDiffError, RemoteError
from .providers.algolia import ClientRegistry
from .services.divergence_service import find_divergent_indices
from .services.download_service import (
    DownloadOutcome,
    DownloadStatus,
    ProgressCallback,
    download_divergent_indices,
)
from .services.index_list_service import IndexSummary, fetch_index_list, find_stale_indices
from .services.report_service import list_genuine_differences

EventCallback = Callable[[str], None]

__all__ = [
    "ComparisonReport",
    "ConfigError",
    "IndexDiffError",
    "RemoteError",
    "compare",
    "run_comparison",
    "run_stale_check",
    "stale_indices",
]


@dataclass(slots=True)
class ComparisonReport:
    source: str
    target: str
    divergent: list[str] = field(default_factory=list)
    downloads: list[DownloadOutcome] = field(default_factory=list)
    differences: list[str] = field(default_factory=list)

    @property
    def failures(self) -> list[DownloadOutcome]:
        return [item for item in self.downloads if item.status == DownloadStatus.FAILED]


def _build_registry(config: Config) -> ClientRegistry:
    return ClientRegistry(resolve_accounts(config))


async def run_comparison(
    config: Config,
    *,
    cache: BlobCache | None = None,
    clients: ClientRegistry | None = None,
    on_event: EventCallback | None = None,
    on_divergent: Callable[[list[str]], None] | None = None,
    on_progress: ProgressCallback | None = None,
) -> ComparisonReport:
    """Run the whole comparison between the source and target accounts.

    Credentials are checked before anything else. Failures while listing
    indices abort the run; failures while downloading one index only mark
    that artifact as errored.
    """

    owns_clients = clients is None
    if clients is None:
        for account in resolve_accounts(config):
            require_credentials(account)
        clients = _build_registry(config)
    cache = cache or BlobCache(config.cache_dir)
    report = ComparisonReport(source=config.source, target=config.target)
    try:
        source_list = await fetch_index_list(
            config.source,
            cache=cache,
            clients=clients,
            temp_suffix=config.temp_suffix,
            on_event=on_event,
        )
        target_list = await fetch_index_list(
            config.target,
            cache=cache,
            clients=clients,
            temp_suffix=config.temp_suffix,
            on_event=on_event,
        )
        report.divergent = find_divergent_indices(source_list, target_list)
        if on_divergent is not None:
            on_divergent(report.divergent)
        report.downloads = await download_divergent_indices(
            report.divergent,
            accounts=config.account_names,
            cache=cache,
            clients=clients,
            page_size=config.page_size,
            on_progress=on_progress,
        )
    finally:
        if owns_clients:
            await clients.aclose()
    report.differences = list_genuine_differences(
        cache,
        source=config.source,
        target=config.target,
        min_bytes=config.min_artifact_bytes,
    )
    return report


async def run_stale_check(
    config: Config,
    account_name: str | None = None,
    *,
    days: int | None = None,
    cache: BlobCache | None = None,
    clients: ClientRegistry | None = None,
) -> list[IndexSummary]:
    """Return the indices of one account that were not updated recently."""

    name = account_name or config.source
    account = resolve_account(config, name)
    owns_clients = clients is None
    if clients is None:
        clients = ClientRegistry([account])
    cache = cache or BlobCache(config.cache_dir)
    try:
        summaries = await fetch_index_list(
            name,
            cache=cache,
            clients=clients,
            temp_suffix=config.temp_suffix,
        )
    finally:
        if owns_clients:
            await clients.aclose()
    return find_stale_indices(summaries, days=days or config.stale_days)


def compare(config: Config | None = None) -> ComparisonReport:
    """Synchronous wrapper around :func:`run_comparison`."""

    return asyncio.run(run_comparison(config or load_config()))


def stale_indices(
    account_name: str | None = None,
    *,
    days: int | None = None,
    config: Config | None = None,
) -> list[IndexSummary]:
    """Synchronous wrapper around :func:`run_stale_check`."""

    return asyncio.run(run_stale_check(config or load_config(), account_name, days=days))
