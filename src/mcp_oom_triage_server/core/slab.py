"""Parser for the optional "Unreclaimable slab info" table.

Newer kernels print it when unreclaimable slab exceeds user memory:

    Unreclaimable slab info:
    Name                      Used          Total
    kmalloc-8192            1028KB       1028KB
"""

from __future__ import annotations

import re

from .models import CleanedBlock, SlabEntry

SLAB_INFO_MARKER = "Unreclaimable slab info:"

_HEADER_RE = re.compile(r"^Name\s+Used\s+Total$")
_ROW_RE = re.compile(r"^(?P<name>\S+)\s+(?P<used>\d+)KB\s+(?P<total>\d+)KB$")


def parse_slab_detail(block: CleanedBlock) -> list[SlabEntry]:
    """Return slab cache rows in input order, or [] when the table is absent."""
    if SLAB_INFO_MARKER not in block.text:
        return []

    entries: list[SlabEntry] = []
    in_table = False
    for line in block.lines:
        if not in_table:
            in_table = _HEADER_RE.match(line) is not None
            continue
        m = _ROW_RE.match(line)
        if not m:
            break
        entries.append(
            SlabEntry(
                name=m.group("name"),
                used_kb=int(m.group("used")),
                total_kb=int(m.group("total")),
            )
        )
    return entries
