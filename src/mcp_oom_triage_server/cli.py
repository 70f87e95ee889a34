from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from mcp_oom_triage_server.core.config import DISPLAY_UNITS, resolve_report_config
from mcp_oom_triage_server.core.formatting import render_cgroup, render_report
from mcp_oom_triage_server.core.models import CgroupEvent
from mcp_oom_triage_server.core.report_service import analyze_file
from mcp_oom_triage_server.core.schema import to_response


def _configure_logging() -> None:
    # stdout carries the report; diagnostics go to stderr.
    level_name = os.getenv("OOM_TRIAGE_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_top_n(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError("top must be an integer") from e
    if value < 1:
        raise argparse.ArgumentTypeError("top must be >= 1")
    return value


def main(argv: Sequence[str] | None = None) -> None:
    p = argparse.ArgumentParser(
        description="Summarize memory usage at the last OOM kill in a kernel log."
    )
    p.add_argument("log_path", help="Kernel log (dmesg, journalctl, syslog); .gz supported")
    p.add_argument("--top", dest="top_n", type=_parse_top_n, default=None, help="Entries per ranking (default: 10)")
    p.add_argument("--unit", dest="display_unit", choices=DISPLAY_UNITS, default=None, help="Display unit for sizes (default: GiB)")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the report as JSON")

    args = p.parse_args(argv)
    _configure_logging()
    path = Path(args.log_path)

    try:
        cfg = resolve_report_config()
        if args.top_n is not None:
            cfg = replace(cfg, top_n=args.top_n)
        if args.display_unit is not None:
            cfg = replace(cfg, display_unit=args.display_unit)

        result = asyncio.run(analyze_file(path, cfg))
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.as_json:
        print(to_response(result).model_dump_json(indent=2))
    elif isinstance(result, CgroupEvent):
        print(render_cgroup(result), end="")
    else:
        print(render_report(result, cfg), end="")


if __name__ == "__main__":
    main()
