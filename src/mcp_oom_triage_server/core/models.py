"""Core data models for OOM report extraction."""

from __future__ import annotations

from dataclasses import dataclass, field

PAGE_SIZE = 4096  # bytes per kernel page

CGROUP_OOM_MARKER = "Memory cgroup out of memory"
INVOCATION_MARKER = "invoked oom-killer"

# Offsets from the "pid" column, stable across every observed header layout.
RSS_OFFSET = 4
NAME_OFFSET = 8


@dataclass(frozen=True, slots=True)
class OomSegment:
    """One OOM report, from the invocation phrase through the summary line."""

    body: str  # everything before the line carrying the end-of-report phrase
    terminator: str  # the end-of-report line, e.g. "Out of memory: Killed process ..."

    @property
    def text(self) -> str:
        return self.body + self.terminator

    @property
    def is_cgroup(self) -> bool:
        return CGROUP_OOM_MARKER in self.text


@dataclass(frozen=True, slots=True)
class CleanedBlock:
    """Segment lines with transport noise and end markers removed."""

    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True, slots=True)
class MemoryMetrics:
    """Scalar memory figures, normalized to KiB."""

    total_ram_kib: float
    free_swap_kib: float
    slab_unreclaimable_kib: float
    shared_kib: float
    hugepages_2m_kib: float
    hugepages_1g_kib: float
    total_swap_kib: float | None = None
    slab_reclaimable_kib: float | None = None
    reserved_pages: int | None = None

    def percent_of_ram(self, kib: float) -> float:
        """Return `kib` as a percentage of total RAM."""
        if not self.total_ram_kib:
            return 0.0
        return kib / self.total_ram_kib * 100.0


@dataclass(frozen=True, slots=True)
class ProcessSchema:
    """Process table columns as printed in the header line."""

    columns: tuple[str, ...]
    pid_index: int

    @property
    def rss_index(self) -> int:
        return self.pid_index + RSS_OFFSET

    @property
    def name_index(self) -> int:
        return self.pid_index + NAME_OFFSET

    @property
    def visible_columns(self) -> tuple[str, ...]:
        """Columns from "pid" through the command name (transport prefix excluded)."""
        return self.columns[self.pid_index : self.name_index + 1]


@dataclass(frozen=True, slots=True)
class ProcessRecord:
    """One process table row, positionally aligned with its schema."""

    fields: tuple[str, ...]
    rss: int  # pages
    name: str

    def visible_fields(self, schema: ProcessSchema) -> tuple[str, ...]:
        return self.fields[schema.pid_index : schema.name_index + 1]


@dataclass(frozen=True, slots=True)
class SlabEntry:
    """Row of the "Unreclaimable slab info" table (sizes in KB as printed)."""

    name: str
    used_kb: int
    total_kb: int


@dataclass(frozen=True, slots=True)
class OomTrigger:
    """Details of the allocation that invoked the OOM killer."""

    command: str | None
    gfp_mask: str | None = None
    order: int | None = None
    oom_score_adj: int | None = None


@dataclass(frozen=True, slots=True)
class KilledProcess:
    """Victim named in the end-of-report summary line."""

    pid: int
    name: str


@dataclass(frozen=True, slots=True)
class OomReport:
    """Everything extracted from a system-wide OOM episode."""

    metrics: MemoryMetrics
    schema: ProcessSchema
    processes: tuple[ProcessRecord, ...]
    commands: dict[str, int]  # command -> summed RSS pages, first-seen order
    total_rss_pages: int
    top_commands: tuple[tuple[str, int], ...]
    top_processes: tuple[ProcessRecord, ...]
    slab_entries: tuple[SlabEntry, ...] = ()
    top_slab_caches: tuple[SlabEntry, ...] = ()
    trigger: OomTrigger | None = None
    killed: KilledProcess | None = None

    @property
    def total_rss_kib(self) -> float:
        return pages_to_kib(self.total_rss_pages)


@dataclass(frozen=True, slots=True)
class CgroupEvent:
    """Result of an OOM kill caused by a memory cgroup limit."""

    marker_counts: dict[str, int] = field(default_factory=dict)
    killed: KilledProcess | None = None


def pages_to_kib(pages: float) -> float:
    """Convert a kernel page count to KiB."""
    return pages * PAGE_SIZE / 1024
