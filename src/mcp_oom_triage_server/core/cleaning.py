"""Strip log-transport noise from an OOM report.

Kernel messages reach us through dmesg, journald or a syslog daemon, each adding its
own prefix (timestamps, hostname, "kernel:" tag, monotonic clock). Everything
downstream relies on a block where those prefixes and the PID brackets are gone.
"""

from __future__ import annotations

import re

from .models import CleanedBlock

# Lines printed right after the process table; dropped so parsers know where to stop.
END_OF_TABLE_RE = re.compile(r"(?i:out of memory:)|oom-kill:|Memory cgroup")

_SYSLOG_TS = r"[A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2}(?:\.\d+)?"
_ISO_TS = r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}\S*"
_DMESG_HUMAN_TS = r"\[[A-Z][a-z]{2}\s+[A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2}\s+\d{4}\]"

_PREFIX_RE = re.compile(
    r"^\s*"
    rf"(?:(?:{_SYSLOG_TS}|{_ISO_TS})\s+(?:\S+\s+)?kernel:\s*|kernel:\s*)?"
    rf"(?:{_DMESG_HUMAN_TS}\s*|\[?\s*\d+\.\d+\]?\s+)?"
)

_RSYSLOG_LF = "#012"


def clean_line(line: str) -> str:
    """Remove the transport prefix and square brackets from one line."""
    line = _PREFIX_RE.sub("", line, count=1)
    return line.replace("[", "").replace("]", "").strip()


def is_end_of_table(line: str) -> bool:
    return END_OF_TABLE_RE.search(line) is not None


def _split_escaped(lines: list[str]) -> list[str]:
    """Split lines at rsyslog's octal LF escape."""
    out: list[str] = []
    for line in lines:
        if _RSYSLOG_LF in line:
            out.extend(line.split(_RSYSLOG_LF))
        else:
            out.append(line)
    return out


def clean_segment(text: str) -> CleanedBlock:
    """Build the cleaned block for a bounded OOM report."""
    lines = _split_escaped(text.replace("\r\n", "\n").split("\n"))
    return CleanedBlock(
        lines=tuple(clean_line(line) for line in lines if not is_end_of_table(line))
    )
