"""Aggregation and top-N views over process and slab data.

Rankings sort on the raw integer units (pages, KB) so ties stay stable; Python's sort
keeps first-seen order for equal keys, also with reverse=True.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .models import ProcessRecord, SlabEntry

DEFAULT_TOP_N = 10


def aggregate_commands(records: Iterable[ProcessRecord]) -> dict[str, int]:
    """Sum RSS pages per command name, keyed in first-seen order."""
    commands: dict[str, int] = {}
    for record in records:
        commands[record.name] = commands.get(record.name, 0) + record.rss
    return commands


def total_rss(records: Iterable[ProcessRecord]) -> int:
    return sum(record.rss for record in records)


def _check_n(n: int) -> None:
    if n < 1:
        raise ValueError("top_n must be >= 1")


def top_commands(commands: Mapping[str, int], n: int = DEFAULT_TOP_N) -> list[tuple[str, int]]:
    """Commands with the largest summed RSS, descending."""
    _check_n(n)
    return sorted(commands.items(), key=lambda item: item[1], reverse=True)[:n]


def top_processes(
    records: Sequence[ProcessRecord], n: int = DEFAULT_TOP_N
) -> list[ProcessRecord]:
    """Individual processes with the largest RSS, descending."""
    _check_n(n)
    return sorted(records, key=lambda record: record.rss, reverse=True)[:n]


def top_slab_caches(entries: Sequence[SlabEntry], n: int = DEFAULT_TOP_N) -> list[SlabEntry]:
    """Slab caches with the largest total size, descending."""
    _check_n(n)
    return sorted(entries, key=lambda entry: entry.total_kb, reverse=True)[:n]
