"""Report indices whose downloaded content differs between two accounts."""

from __future__ import annotations

from typing import Iterable

from ..cache import ARTIFACT_SUFFIX, INDICES_PREFIX, ArtifactKey, BlobCache
from ..config import DEFAULT_MIN_ARTIFACT_BYTES


def group_artifacts(
    cache: BlobCache,
    accounts: Iterable[str],
) -> dict[str, list[str]]:
    """Return index names found on disk, grouped by account, in glob order."""

    account_names = tuple(accounts)
    groups: dict[str, list[str]] = {name: [] for name in account_names}
    for blob_key in cache.glob(f"{INDICES_PREFIX}/*{ARTIFACT_SUFFIX}"):
        key = ArtifactKey.parse(blob_key, account_names)
        if key is None:
            continue
        groups[key.account_name].append(key.index_name)
    return groups


def _artifact_size(cache: BlobCache, key: ArtifactKey) -> int:
    if not cache.exists(key.blob_key):
        return 0
    return cache.size(key.blob_key)


def list_genuine_differences(
    cache: BlobCache,
    *,
    source: str,
    target: str,
    min_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES,
) -> list[str]:
    """Return the indices whose *target* artifact differs in size from *source*.

    Target artifacts under *min_bytes* are treated as empty or as error
    markers and never reported. Sizes stand in for content: records are
    normalized before being written, so equal content gives equal files.
    """

    groups = group_artifacts(cache, (source, target))
    results: list[str] = []
    for index_name in groups[target]:
        target_size = _artifact_size(cache, ArtifactKey(index_name, target))
        source_size = _artifact_size(cache, ArtifactKey(index_name, source))
        if target_size < min_bytes or target_size == source_size:
            continue
        results.append(index_name)
    return results
