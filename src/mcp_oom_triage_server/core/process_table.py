"""Process table ("Tasks state") parsing.

The header wording changes between kernel versions (nr_ptes, pgtables_bytes, ...), but
RSS and the command name always sit at fixed offsets from the "pid" column. The schema
is therefore discovered from the header and rows are read through those offsets.
"""

from __future__ import annotations

import logging
import re

from .errors import ColumnNotFound, NumericParseFailure, RowFieldCountMismatch
from .models import NAME_OFFSET, CleanedBlock, ProcessRecord, ProcessSchema

logger = logging.getLogger(__name__)

_PS_LIST_RE = re.compile(r"(?P<header>.*pid.+\bname\b)(?P<rows>(?s:.*))")
_UINT_RE = re.compile(r"[0-9]+")


def parse_header(header: str) -> ProcessSchema:
    """Split the header line into a schema anchored at the "pid" column."""
    columns = tuple(header.split())
    try:
        pid_index = columns.index("pid")
    except ValueError as e:
        raise ColumnNotFound(f"No 'pid' column in process header: {header.strip()!r}") from e

    if len(columns) <= pid_index + NAME_OFFSET:
        raise ColumnNotFound(
            f"Process header too short for rss/name columns: {header.strip()!r}"
        )
    return ProcessSchema(columns=columns, pid_index=pid_index)


def parse_row(line: str, schema: ProcessSchema) -> ProcessRecord:
    """Split one data row and resolve its RSS and command name."""
    fields = tuple(line.split())
    if len(fields) != len(schema.columns):
        raise RowFieldCountMismatch(line, expected=len(schema.columns), actual=len(fields))

    rss = fields[schema.rss_index]
    if not _UINT_RE.fullmatch(rss):
        raise NumericParseFailure(schema.columns[schema.rss_index], rss)
    return ProcessRecord(fields=fields, rss=int(rss), name=fields[schema.name_index])


def parse_process_table(block: CleanedBlock) -> tuple[ProcessSchema, list[ProcessRecord]]:
    """Return the table schema and its rows in input order."""
    m = _PS_LIST_RE.search(block.text)
    if not m:
        raise ColumnNotFound("No process table header with 'pid' and 'name' columns")

    schema = parse_header(m.group("header"))
    records = [
        parse_row(line, schema)
        for line in m.group("rows").strip().splitlines()
        if line.strip()
    ]
    logger.debug("Parsed %d process rows (%d columns)", len(records), len(schema.columns))
    return schema, records
