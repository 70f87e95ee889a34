"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def diagnose_oom(log_path: str, top_n: int = 10) -> list[dict[str, Any]]:
        """Build a prompt for an OOM incident diagnosis."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a Linux memory troubleshooting assistant. "
                    "Explain OOM kills from kernel data only. "
                    "Do not invent figures; if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Diagnose the last OOM kill using analyze_oom_log. Follow this workflow:\n"
                    f"- Call analyze_oom_log with log_path={log_path!r} and top_n={top_n}.\n"
                    "- If the result kind is \"cgroup\", state that a memory cgroup limit was "
                    "hit (not system-wide exhaustion) and stop after suggesting how to inspect "
                    "the cgroup limit.\n"
                    "- Otherwise compare total_rss_percent, slab_unreclaimable_percent, "
                    "shared_percent and the huge page percentages to find where RAM went.\n"
                    "- Quote figures from the tool output; do not fabricate processes.\n\n"
                    "Return this structure:\n"
                    "1) What happened (1-3 bullets, include the killed process)\n"
                    "2) Where the memory went (largest consumers with sizes)\n"
                    "3) Suspected root cause (1-2 sentences; say 'Unknown' if unclear)\n"
                    "4) Next actions (2-4 bullets)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: if you need raw context, you can read the log via:",
                    },
                    {"type": "resource", "uri": f"log://{log_path}"},
                ],
            },
        ]
