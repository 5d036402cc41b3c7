"""Turn a raw record stream into a canonical, diff-stable record list."""

from __future__ import annotations

import json
from typing import Any, AsyncIterable, Iterable, Mapping

VOLATILE_FIELDS: tuple[str, ...] = ("objectID",)
SORT_FIELDS: tuple[str, ...] = (
    "url",
    "hierarchy.lvl0",
    "hierarchy.lvl1",
    "hierarchy.lvl2",
    "hierarchy.lvl3",
    "hierarchy.lvl4",
    "hierarchy.lvl5",
    "hierarchy.lvl6",
    "weight.position",
)

_MISSING = object()


async def normalize_records(
    stream: AsyncIterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Drain *stream* and return its records without identifiers, sorted.

    Nothing is returned until the stream is exhausted, so an error raised by
    the stream propagates and no partial result escapes.
    """

    records = [record async for record in stream]
    return sort_records(strip_volatile_fields(records))


def strip_volatile_fields(records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [
        {name: value for name, value in record.items() if name not in VOLATILE_FIELDS}
        for record in records
    ]


def sort_records(records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    # sorted() is stable: fully equal keys keep their arrival order.
    return sorted(records, key=record_sort_key)


def record_sort_key(record: Mapping[str, Any]) -> tuple[tuple[Any, ...], ...]:
    return tuple(_value_key(_lookup(record, path)) for path in SORT_FIELDS)


def _lookup(record: Mapping[str, Any], path: str) -> Any:
    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _value_key(value: Any) -> tuple[Any, ...]:
    # missing/null < numbers < strings < anything else (by canonical JSON)
    if value is _MISSING or value is None:
        return (0,)
    if isinstance(value, (bool, int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, json.dumps(value, sort_keys=True, ensure_ascii=False, default=str))
