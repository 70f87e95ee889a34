"""JSON response models for OOM reports (CLI --json and the MCP tool)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .models import CgroupEvent, KilledProcess, OomReport, OomTrigger, pages_to_kib


class TriggerModel(BaseModel):
    command: str | None = Field(default=None, description="Command that invoked the OOM killer.")
    gfp_mask: str | None = Field(default=None, description="Allocation flags of the failed request.")
    order: int | None = Field(default=None, description="Allocation order (2^order pages).")
    oom_score_adj: int | None = Field(default=None, description="oom_score_adj of the invoker.")


class KilledProcessModel(BaseModel):
    pid: int = Field(description="PID of the process the kernel killed.")
    name: str = Field(description="Command name of the killed process.")


class MetricsModel(BaseModel):
    total_ram_kib: float = Field(description="Total RAM net of reserved pages.")
    free_swap_kib: float
    total_swap_kib: float | None = None
    hugepages_2m_kib: float
    hugepages_2m_percent: float
    hugepages_1g_kib: float
    hugepages_1g_percent: float
    slab_unreclaimable_kib: float
    slab_unreclaimable_percent: float
    slab_reclaimable_kib: float | None = None
    shared_kib: float
    shared_percent: float


class CommandUsage(BaseModel):
    name: str
    rss_pages: int = Field(ge=0, description="Summed resident pages of all processes.")
    rss_kib: float


class ProcessUsage(BaseModel):
    pid: str
    name: str
    rss_pages: int = Field(ge=0)
    rss_kib: float
    columns: dict[str, str] = Field(
        default_factory=dict, description="Row values keyed by header column, pid..name."
    )


class SlabUsage(BaseModel):
    name: str
    used_kb: int = Field(ge=0)
    total_kb: int = Field(ge=0)


class OomReportResponse(BaseModel):
    kind: Literal["system"] = "system"
    metrics: MetricsModel
    top_commands: list[CommandUsage] = Field(default_factory=list)
    top_processes: list[ProcessUsage] = Field(default_factory=list)
    top_slab_caches: list[SlabUsage] = Field(default_factory=list)
    process_count: int = Field(ge=0)
    total_rss_pages: int = Field(ge=0)
    total_rss_kib: float
    total_rss_percent: float
    trigger: TriggerModel | None = None
    killed: KilledProcessModel | None = None


class CgroupLimitResponse(BaseModel):
    kind: Literal["cgroup"] = "cgroup"
    message: str = "The OOM kill was triggered by a memory cgroup limit."
    marker_counts: dict[str, int] = Field(
        default_factory=dict, description="Lines in the whole log containing each marker."
    )
    killed: KilledProcessModel | None = None


def _trigger(trigger: OomTrigger | None) -> TriggerModel | None:
    if trigger is None:
        return None
    return TriggerModel(
        command=trigger.command,
        gfp_mask=trigger.gfp_mask,
        order=trigger.order,
        oom_score_adj=trigger.oom_score_adj,
    )


def _killed(killed: KilledProcess | None) -> KilledProcessModel | None:
    if killed is None:
        return None
    return KilledProcessModel(pid=killed.pid, name=killed.name)


def report_to_response(report: OomReport) -> OomReportResponse:
    m = report.metrics
    schema = report.schema
    return OomReportResponse(
        metrics=MetricsModel(
            total_ram_kib=m.total_ram_kib,
            free_swap_kib=m.free_swap_kib,
            total_swap_kib=m.total_swap_kib,
            hugepages_2m_kib=m.hugepages_2m_kib,
            hugepages_2m_percent=m.percent_of_ram(m.hugepages_2m_kib),
            hugepages_1g_kib=m.hugepages_1g_kib,
            hugepages_1g_percent=m.percent_of_ram(m.hugepages_1g_kib),
            slab_unreclaimable_kib=m.slab_unreclaimable_kib,
            slab_unreclaimable_percent=m.percent_of_ram(m.slab_unreclaimable_kib),
            slab_reclaimable_kib=m.slab_reclaimable_kib,
            shared_kib=m.shared_kib,
            shared_percent=m.percent_of_ram(m.shared_kib),
        ),
        top_commands=[
            CommandUsage(name=name, rss_pages=rss, rss_kib=pages_to_kib(rss))
            for name, rss in report.top_commands
        ],
        top_processes=[
            ProcessUsage(
                pid=p.fields[schema.pid_index],
                name=p.name,
                rss_pages=p.rss,
                rss_kib=pages_to_kib(p.rss),
                columns=dict(zip(schema.visible_columns, p.visible_fields(schema))),
            )
            for p in report.top_processes
        ],
        top_slab_caches=[
            SlabUsage(name=s.name, used_kb=s.used_kb, total_kb=s.total_kb)
            for s in report.top_slab_caches
        ],
        process_count=len(report.processes),
        total_rss_pages=report.total_rss_pages,
        total_rss_kib=report.total_rss_kib,
        total_rss_percent=m.percent_of_ram(report.total_rss_kib),
        trigger=_trigger(report.trigger),
        killed=_killed(report.killed),
    )


def to_response(result: OomReport | CgroupEvent) -> OomReportResponse | CgroupLimitResponse:
    """Convert an analysis result into its JSON-serializable response model."""
    if isinstance(result, CgroupEvent):
        return CgroupLimitResponse(
            marker_counts=dict(result.marker_counts),
            killed=_killed(result.killed),
        )
    return report_to_response(result)
