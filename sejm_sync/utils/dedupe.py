"""
Utility helpers for deduplicating normalized rows before upsert.

Responsibility: Collapse records sharing a key so a batch upsert writes
each key once, keeping the last occurrence (matching the store's
last-write-wins semantics).
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")
K = TypeVar("K")


def dedupe_by_key(
    records: Iterable[T],
    key_fn: Callable[[T], K],
) -> Tuple[List[T], int]:
    """
    Remove duplicate records using a key function.

    Later records replace earlier ones with the same key; the position of
    the first occurrence is kept. Records whose key is None are dropped.

    Args:
        records: Iterable of records to deduplicate.
        key_fn: Function used to compute the deduplication key.

    Returns:
        Tuple of (unique_records, duplicate_count).
    """
    seen: dict[K, T] = {}
    duplicates = 0

    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        if key in seen:
            duplicates += 1
        seen[key] = record

    return list(seen.values()), duplicates
