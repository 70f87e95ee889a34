"""Human-readable rendering of OOM reports.

Sizes are shown in the configured display unit (MiB or GiB); swap stays in KiB as the
kernel prints it. Percentages are always relative to total RAM.
"""

from __future__ import annotations

from .config import ReportConfig, resolve_report_config
from .models import CgroupEvent, OomReport, pages_to_kib

_KIB_PER_UNIT = {"MiB": 1024.0, "GiB": 1024.0 * 1024.0}

_PS_HEADER_FMT = "{:>7} {:>5} {:>6} {:>10} {:>8} {:>16} {:>10} {:>15}  {:<15}"


def to_unit(kib: float, unit: str) -> float:
    return kib / _KIB_PER_UNIT[unit]


def _size(kib: float, unit: str) -> str:
    return f"{to_unit(kib, unit):.1f} {unit}"


def render_report(report: OomReport, cfg: ReportConfig | None = None) -> str:
    """Render the full text report."""
    cfg = resolve_report_config(cfg)
    unit = cfg.display_unit
    m = report.metrics
    out: list[str] = []

    if report.trigger is not None and report.trigger.command:
        t = report.trigger
        details = ", ".join(
            f"{k}={v}"
            for k, v in (("gfp_mask", t.gfp_mask), ("order", t.order), ("oom_score_adj", t.oom_score_adj))
            if v is not None
        )
        out.append(f"\nOOM killer invoked by: {t.command}" + (f" ({details})" if details else ""))
    if report.killed is not None:
        out.append(f"Killed process: {report.killed.pid} ({report.killed.name})")

    out.append("\nMemory total:")
    out.append(f"    Total RAM: {_size(m.total_ram_kib, unit)}")

    out.append("\nSwap:")
    out.append(f"    Free swap: {m.free_swap_kib:.1f} KiB")
    if m.total_swap_kib is not None:
        out.append(f"    Total swap: {m.total_swap_kib:.1f} KiB")

    out.append("\nHuge Pages:")
    out.append(
        f"    Allocated 2 MiB huge pages: {to_unit(m.hugepages_2m_kib, unit):9.1f} {unit}"
        f"  --  ({m.percent_of_ram(m.hugepages_2m_kib):.1f}%)"
    )
    out.append(
        f"    Allocated 1 GiB huge pages: {to_unit(m.hugepages_1g_kib, unit):9.1f} {unit}"
        f"  --  ({m.percent_of_ram(m.hugepages_1g_kib):.1f}%)"
    )

    out.append("\nSlab:")
    out.append(
        f"    Unreclaimable slab: {_size(m.slab_unreclaimable_kib, unit)}"
        f"  --  ({m.percent_of_ram(m.slab_unreclaimable_kib):.1f}%)"
    )
    if report.top_slab_caches:
        out.append(f"\n    Top {len(report.top_slab_caches)} unreclaimable slab caches:\n")
        out.append(f"    {'Name':<24} {'Used':>12} {'Total':>12}")
        for s in report.top_slab_caches:
            out.append(
                f"    {s.name:<24} {_size(s.used_kb, unit):>12} {_size(s.total_kb, unit):>12}"
            )

    out.append("\nShared Memory:")
    out.append(
        f"    Shared memory: {_size(m.shared_kib, unit)}"
        f"  --  ({m.percent_of_ram(m.shared_kib):.1f}%)"
    )

    out.append(f"\nTop {len(report.top_commands)} unique commands using memory:\n")
    for name, rss in report.top_commands:
        out.append(f"    {name}: {_size(pages_to_kib(rss), unit)}")

    out.append("\nProcesses using most memory:\n")
    out.append(_PS_HEADER_FMT.format(*report.schema.visible_columns))
    for p in report.top_processes:
        out.append(_PS_HEADER_FMT.format(*p.visible_fields(report.schema)))

    out.append(
        f"\nTotal RSS of {len(report.processes)} processes: "
        f"{_size(report.total_rss_kib, unit)}"
        f"  --  ({m.percent_of_ram(report.total_rss_kib):.1f}%)"
    )
    return "\n".join(out) + "\n"


def render_cgroup(event: CgroupEvent) -> str:
    """Render the short notice printed for cgroup-limited OOM kills."""
    out = ["The OOM kill was triggered by a memory cgroup limit, not system-wide exhaustion."]
    if event.killed is not None:
        out.append(f"Killed process: {event.killed.pid} ({event.killed.name})")
    for marker, count in event.marker_counts.items():
        out.append(f"    Lines containing {marker!r}: {count}")
    return "\n".join(out) + "\n"
