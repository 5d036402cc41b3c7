"""Shortlist the indices whose size differs between two accounts."""

from __future__ import annotations

from typing import Sequence

from .index_list_service import IndexSummary


def data_size_by_name(summaries: Sequence[IndexSummary]) -> dict[str, int]:
    return {summary.name: summary.data_size for summary in summaries}


def find_divergent_indices(
    source: Sequence[IndexSummary],
    target: Sequence[IndexSummary],
) -> list[str]:
    """Return names from *source* whose data size differs in *target*.

    A name missing from *target* counts as different. Names that only exist
    in *target* are not reported.
    """

    source_sizes = data_size_by_name(source)
    target_sizes = data_size_by_name(target)
    return [
        name
        for name, size in source_sizes.items()
        if name and target_sizes.get(name) != size
    ]
