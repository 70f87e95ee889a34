"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from mcp_oom_triage_server.core.config import DISPLAY_UNITS, resolve_report_config
from mcp_oom_triage_server.core.formatting import render_cgroup, render_report
from mcp_oom_triage_server.core.models import CgroupEvent
from mcp_oom_triage_server.core.report_service import analyze_file
from mcp_oom_triage_server.core.schema import to_response

HARD_TOP_N = 100


async def analyze_oom_log_impl(
    *,
    log_path: str,
    top_n: int | None = None,
    include_text: bool = False,
    display_unit: str | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_oom_log` MCP tool.

    Notes
    -----
    - top_n overrides OOM_TRIAGE_TOP_N and is capped at HARD_TOP_N.
    - JSON sizes are always KiB/pages; display_unit only affects the rendered text.
    - A cgroup-limited kill returns {"kind": "cgroup", ...} instead of a full report.
    """
    cfg = resolve_report_config()
    if top_n is not None:
        if top_n <= 0:
            raise ValueError("top_n must be > 0")
        cfg = replace(cfg, top_n=min(top_n, HARD_TOP_N))
    if display_unit is not None:
        if display_unit not in DISPLAY_UNITS:
            raise ValueError(f"display_unit must be one of: {', '.join(DISPLAY_UNITS)}")
        cfg = replace(cfg, display_unit=display_unit)

    result = await analyze_file(log_path, cfg)
    out = to_response(result).model_dump()
    if include_text:
        if isinstance(result, CgroupEvent):
            out["text"] = render_cgroup(result)
        else:
            out["text"] = render_report(result, cfg)
    return out
