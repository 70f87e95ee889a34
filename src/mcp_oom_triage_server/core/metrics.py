"""Scalar memory metrics extracted from a cleaned OOM report.

Every extractor works on the whole cleaned block text and returns KiB. Extractors raise
FieldNotFound when their figure is missing; extract_metrics() decides which of those
are fatal.
"""

from __future__ import annotations

import logging
import re

from .errors import FieldNotFound, MandatoryFieldMissing
from .models import CleanedBlock, MemoryMetrics, pages_to_kib

logger = logging.getLogger(__name__)

_PAGES_RAM_RE = re.compile(r"(\d+) pages RAM")
_PAGES_RESERVED_RE = re.compile(r"(\d+) pages reserved")
_FREE_SWAP_RE = re.compile(r"Free swap\s*=\s*(\d+)")
_TOTAL_SWAP_RE = re.compile(r"Total swap\s*=\s*(\d+)kB")
# Trailing \b skips the per-zone "kB" figures that follow the global page counts.
_SLAB_UNRECLAIMABLE_RE = re.compile(r"slab_unreclaimable:(\d+)\b")
_SLAB_RECLAIMABLE_RE = re.compile(r"slab_reclaimable:(\d+)\b")
_SHMEM_RE = re.compile(r"\bshmem:(\d+)\b")

HUGEPAGE_2M_KB = 2048
HUGEPAGE_1G_KB = 1048576
_HUGEPAGES_RE = {
    size_kb: re.compile(rf"hugepages_total=(\d+).+?hugepages_size={size_kb}kB")
    for size_kb in (HUGEPAGE_2M_KB, HUGEPAGE_1G_KB)
}


def _first_int(rx: re.Pattern[str], text: str, *, field: str) -> int:
    m = rx.search(text)
    if not m:
        raise FieldNotFound(field, rx.pattern)
    return int(m.group(1))


def reserved_pages(text: str) -> int:
    return _first_int(_PAGES_RESERVED_RE, text, field="reserved_pages")


def total_ram_kib(text: str) -> float:
    """Total RAM from "N pages RAM", net of "N pages reserved" when printed."""
    pages = _first_int(_PAGES_RAM_RE, text, field="total_ram_kib")
    try:
        pages -= reserved_pages(text)
    except FieldNotFound:
        logger.debug("No reserved pages figure; using pages RAM as is")
    return pages_to_kib(pages)


def free_swap_kib(text: str) -> float:
    """Free swap, reported by the kernel in 2 KB blocks."""
    value = _first_int(_FREE_SWAP_RE, text, field="free_swap_kib")
    return value * 2048 / 1024


def total_swap_kib(text: str) -> float:
    return float(_first_int(_TOTAL_SWAP_RE, text, field="total_swap_kib"))


def slab_unreclaimable_kib(text: str) -> float:
    """Unreclaimable slab; the first occurrence is the total across all zones."""
    pages = _first_int(_SLAB_UNRECLAIMABLE_RE, text, field="slab_unreclaimable_kib")
    return pages_to_kib(pages)


def slab_reclaimable_kib(text: str) -> float:
    pages = _first_int(_SLAB_RECLAIMABLE_RE, text, field="slab_reclaimable_kib")
    return pages_to_kib(pages)


def shared_kib(text: str) -> float:
    pages = _first_int(_SHMEM_RE, text, field="shared_kib")
    return pages_to_kib(pages)


def hugepages_kib(text: str) -> tuple[float, float]:
    """Return (2 MiB class, 1 GiB class) huge page allocations in KiB.

    Counts are summed over every per-node record. The kernel prints the page size in
    KB, so the KiB figure is count * size / 1.024.
    """
    totals: dict[int, float] = {}
    for size_kb, rx in _HUGEPAGES_RE.items():
        count = sum(int(m.group(1)) for m in rx.finditer(text))
        totals[size_kb] = count * (size_kb / 1.024)
    return totals[HUGEPAGE_2M_KB], totals[HUGEPAGE_1G_KB]


def _mandatory(extractor, text: str) -> float:
    try:
        return extractor(text)
    except FieldNotFound as e:
        raise MandatoryFieldMissing(e.field) from e


def _optional(extractor, text: str):
    try:
        return extractor(text)
    except FieldNotFound as e:
        logger.info("%s", e)
        return None


def extract_metrics(block: CleanedBlock) -> MemoryMetrics:
    """Run every extractor over the cleaned block."""
    text = block.text
    hugepages_2m, hugepages_1g = hugepages_kib(text)
    return MemoryMetrics(
        total_ram_kib=_mandatory(total_ram_kib, text),
        free_swap_kib=_mandatory(free_swap_kib, text),
        slab_unreclaimable_kib=_mandatory(slab_unreclaimable_kib, text),
        shared_kib=_mandatory(shared_kib, text),
        hugepages_2m_kib=hugepages_2m,
        hugepages_1g_kib=hugepages_1g,
        total_swap_kib=_optional(total_swap_kib, text),
        slab_reclaimable_kib=_optional(slab_reclaimable_kib, text),
        reserved_pages=_optional(reserved_pages, text),
    )
