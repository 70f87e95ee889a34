"""OOM report loading and analysis.

This module is the main integration point: it reads a kernel log and runs the
extraction pipeline (locate -> extract -> clean -> metrics/table/slab -> rank).
"""

from __future__ import annotations

import asyncio
import gzip
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .cleaning import clean_line, clean_segment
from .config import ReportConfig, resolve_report_config
from .metrics import extract_metrics
from .models import CGROUP_OOM_MARKER, INVOCATION_MARKER, CgroupEvent, OomReport
from .process_table import parse_process_table
from .ranking import aggregate_commands, top_commands, top_processes, top_slab_caches, total_rss
from .segment import (
    count_marker_lines,
    extract_report,
    invocation_line,
    locate_last_episode,
    parse_killed_process,
    parse_trigger,
)
from .slab import parse_slab_detail

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def load_document(
    log_path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> str:
    """Read the whole log into memory."""
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        return await f.read()


def analyze_document(document: str, cfg: ReportConfig | None = None) -> OomReport | CgroupEvent:
    """Analyze the most recent OOM episode in a kernel log.

    Returns a CgroupEvent (and stops) when the kill was caused by a memory cgroup
    limit; otherwise the full OomReport. Raises an OomReportError subclass on the
    first fatal extraction failure.
    """
    cfg = resolve_report_config(cfg)

    segment = extract_report(locate_last_episode(document))
    killed = parse_killed_process(segment.terminator)

    if segment.is_cgroup:
        logger.info("OOM kill was triggered by a memory cgroup limit")
        counts = count_marker_lines(document, (INVOCATION_MARKER, CGROUP_OOM_MARKER))
        return CgroupEvent(marker_counts=counts, killed=killed)

    block = clean_segment(segment.text)
    metrics = extract_metrics(block)
    schema, records = parse_process_table(block)
    slab_entries = parse_slab_detail(block)

    commands = aggregate_commands(records)
    line = invocation_line(document)
    trigger = parse_trigger(clean_line(line)) if line is not None else None

    logger.debug(
        "OOM report: %d processes, %d commands, %d slab caches",
        len(records),
        len(commands),
        len(slab_entries),
    )
    return OomReport(
        metrics=metrics,
        schema=schema,
        processes=tuple(records),
        commands=commands,
        total_rss_pages=total_rss(records),
        top_commands=tuple(top_commands(commands, cfg.top_n)),
        top_processes=tuple(top_processes(records, cfg.top_n)),
        slab_entries=tuple(slab_entries),
        top_slab_caches=tuple(top_slab_caches(slab_entries, cfg.top_n)),
        trigger=trigger,
        killed=killed,
    )


async def analyze_file(
    log_path: str | Path,
    cfg: ReportConfig | None = None,
    **load_kwargs,
) -> OomReport | CgroupEvent:
    """Load a log file and analyze it off the event loop."""
    document = await load_document(log_path, **load_kwargs)
    return await asyncio.to_thread(analyze_document, document, cfg)
