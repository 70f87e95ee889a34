"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (analyze the last OOM kill in a log file)
- Resources: addressable data blobs (sample report, response schema, log contents)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_oom_triage_server.server.oom_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_oom_triage_server.prompts.registry import register_prompts
from mcp_oom_triage_server.resources.registry import register_resources
from mcp_oom_triage_server.tools.analyze import analyze_oom_log_impl

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("OOM_TRIAGE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("oom-triage", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_oom_log(
    log_path: str,
    top_n: int | None = None,
    include_text: bool = False,
    display_unit: str | None = None,
) -> dict[str, Any]:
    """Summarize memory usage at the most recent OOM kill in a kernel log.

    Parameters
    ----------
    log_path:
        Path to a local kernel log (dmesg, journalctl or syslog output). Supports .gz.
    top_n:
        Entries per ranking (commands, processes, slab caches). Default 10.
    include_text:
        Also return the human-readable report under "text".
    display_unit:
        "MiB" or "GiB" for the text report.

    Returns
    -------
    dict:
        {"kind": "system", "metrics": {...}, "top_commands": [...], ...} or
        {"kind": "cgroup", "marker_counts": {...}} when a cgroup limit caused the kill.
    """
    return await analyze_oom_log_impl(
        log_path=log_path,
        top_n=top_n,
        include_text=include_text,
        display_unit=display_unit,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
