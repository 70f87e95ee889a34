"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_oom_triage_server.core.schema import CgroupLimitResponse, OomReportResponse

ALLOWED_FILE_SUFFIXES = {".log", ".txt"}
BASE_DIR_ENV = "OOM_TRIAGE_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_OOM_LOG = """\
[ 7566.100000] stress invoked oom-killer: gfp_mask=0x6280ca(GFP_HIGHUSER_MOVABLE|__GFP_ZERO), order=0, oom_score_adj=0
[ 7566.100010] CPU: 2 PID: 4242 Comm: stress Not tainted 5.15.0-91-generic #101-Ubuntu
[ 7566.100020] Mem-Info:
[ 7566.100030] active_anon:1413442 inactive_anon:1509191 isolated_anon:0
[ 7566.100030]  active_file:29 inactive_file:186 isolated_file:0
[ 7566.100030]  slab_reclaimable:130091 slab_unreclaimable:89303
[ 7566.100030]  mapped:1293 shmem:19540 pagetables:25704 bounce:0
[ 7566.100030]  free:34629 free_pcp:0 free_cma:0
[ 7566.100040] Node 0 Normal free:61900kB min:61948kB low:75384kB high:88820kB shmem:78160kB slab_unreclaimable:357212kB
[ 7566.100050] Node 0 hugepages_total=0 hugepages_free=0 hugepages_surp=0 hugepages_size=1048576kB
[ 7566.100050] Node 0 hugepages_total=16 hugepages_free=16 hugepages_surp=0 hugepages_size=2048kB
[ 7566.100060] 44659 total pagecache pages
[ 7566.100060] Free swap  = 84kB
[ 7566.100060] Total swap = 2097148kB
[ 7566.100070] 4194304 pages RAM
[ 7566.100070] 0 pages HighMem/MovableOnly
[ 7566.100070] 97082 pages reserved
[ 7566.100070] 0 pages cma reserved
[ 7566.100080] Tasks state (memory values in pages):
[ 7566.100080] [  pid  ]   uid  tgid total_vm      rss pgtables_bytes swapents oom_score_adj name
[ 7566.100090] [    246]     0   246    16404       66   159744      303          -250 systemd-journal
[ 7566.100090] [    569]     0   569   204061     1279   708608     7704             0 Xorg
[ 7566.100090] [    791]   504   791   453174     1056   393216     2624           200 pulseaudio
[ 7566.100090] [   4240]  1000  4240   800000   700000  5800000        0             0 stress
[ 7566.100090] [   4242]  1000  4242   800000  2900000 23300000        0             0 stress
[ 7566.100100] oom-kill:constraint=CONSTRAINT_NONE,nodemask=(null),cpuset=/,mems_allowed=0,global_oom,task_memcg=/user.slice,task=stress,pid=4242,uid=1000
[ 7566.100110] Out of memory: Killed process 4242 (stress) total-vm:3200000kB, anon-rss:11600000kB, file-rss:0kB, shmem-rss:0kB, UID:1000 pgtables:22753kB oom_score_adj:0
"""


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_log_path(path: str) -> Path:
    """Resolve and validate a log resource path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _read_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://oom-triage/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://oom-triage/help\n"
            "- app://oom-triage/examples/sample-oom\n"
            "- app://oom-triage/schemas/oom-report\n"
            f"- log://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {_base_dir()}\n"
        )

    @mcp.resource("app://oom-triage/examples/sample-oom")
    def sample_oom() -> str:
        """Return a small system-wide OOM kill report for demos and tests."""
        return SAMPLE_OOM_LOG

    @mcp.resource("app://oom-triage/schemas/oom-report")
    def oom_report_schema() -> dict[str, Any]:
        """Return the JSON schemas of analyze_oom_log results."""
        return {
            "system": OomReportResponse.model_json_schema(),
            "cgroup": CgroupLimitResponse.model_json_schema(),
        }

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        p = _resolve_log_path(path)
        return await asyncio.to_thread(_read_text, p)
