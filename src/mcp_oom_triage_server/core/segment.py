"""Locate and bound the most recent OOM report inside a kernel log."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .errors import MarkerNotFound, SegmentMatchFailed
from .models import INVOCATION_MARKER, KilledProcess, OomSegment, OomTrigger

logger = logging.getLogger(__name__)

# The body spans lines lazily; the terminator is confined to the first line that
# carries the end-of-report phrase.
_REPORT_RE = re.compile(
    r"(?P<body>(?s:(?:\w+\s)?invoked oom-killer.*?))"
    r"(?P<terminator>.*?(?i:out of memory:).*)"
)

_TRIGGER_COMMAND_RE = re.compile(r"(?P<command>\S+)\s+invoked oom-killer")
_GFP_MASK_RE = re.compile(r"gfp_mask=(?P<gfp_mask>0x[0-9a-fA-F]+)")
_ORDER_RE = re.compile(r"\border=(?P<order>-?\d+)")
_SCORE_ADJ_RE = re.compile(r"oom_score_adj=(?P<adj>-?\d+)")

_KILLED_RE = re.compile(r"Kill(?:ed)? process (?P<pid>\d+) \((?P<name>[^)]*)\)")


def locate_last_episode(document: str) -> str:
    """Return the document tail starting at the last OOM invocation."""
    i = document.rfind(INVOCATION_MARKER)
    if i < 0:
        raise MarkerNotFound(f"string {INVOCATION_MARKER!r} not found")
    return document[i:]


def extract_report(tail: str) -> OomSegment:
    """Bound one OOM report from its invocation through the summary line."""
    m = _REPORT_RE.search(tail)
    if not m:
        raise SegmentMatchFailed(
            "Could not match an oom kill message; the report may be truncated"
        )
    return OomSegment(body=m.group("body"), terminator=m.group("terminator"))


def count_marker_lines(document: str, markers: Iterable[str]) -> dict[str, int]:
    """Count the lines containing each marker (grep -c semantics)."""
    lines = document.split("\n")
    return {marker: sum(1 for line in lines if marker in line) for marker in markers}


def invocation_line(document: str) -> str | None:
    """Return the full log line of the last OOM invocation."""
    i = document.rfind(INVOCATION_MARKER)
    if i < 0:
        return None
    start = document.rfind("\n", 0, i) + 1
    end = document.find("\n", i)
    if end < 0:
        end = len(document)
    return document[start:end]


def parse_trigger(line: str) -> OomTrigger:
    """Extract the invoking command and allocation details from an invocation line."""
    m = _TRIGGER_COMMAND_RE.search(line)
    command = m.group("command") if m else None
    # drop the "kernel:" tag glued to the command by some syslog daemons
    if command and command.startswith("kernel:"):
        command = command[len("kernel:") :] or None

    gfp = _GFP_MASK_RE.search(line)
    order = _ORDER_RE.search(line)
    adj = _SCORE_ADJ_RE.search(line)
    return OomTrigger(
        command=command,
        gfp_mask=gfp.group("gfp_mask") if gfp else None,
        order=int(order.group("order")) if order else None,
        oom_score_adj=int(adj.group("adj")) if adj else None,
    )


def parse_killed_process(terminator: str) -> KilledProcess | None:
    """Return the victim named in the summary line, if any."""
    m = _KILLED_RE.search(terminator)
    if not m:
        logger.info("No killed process in summary line: %r", terminator.strip())
        return None
    return KilledProcess(pid=int(m.group("pid")), name=m.group("name"))
