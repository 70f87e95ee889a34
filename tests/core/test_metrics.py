from __future__ import annotations

import logging

import pytest

from mcp_oom_triage_server.core.cleaning import clean_segment
from mcp_oom_triage_server.core.errors import FieldNotFound, MandatoryFieldMissing
from mcp_oom_triage_server.core.metrics import (
    extract_metrics,
    free_swap_kib,
    hugepages_kib,
    shared_kib,
    slab_unreclaimable_kib,
    total_ram_kib,
)
from mcp_oom_triage_server.core.models import CleanedBlock
from mcp_oom_triage_server.core.segment import extract_report, locate_last_episode


def test_total_ram_subtracts_reserved_pages() -> None:
    text = (
        "Dec 20 03:17:52 localhost kernel: 75669.637758 5241544212132178 pages RAM\n"
        "Dec 20 03:17:52 localhost kernel: 75669.637760 132311 pages reserved\n"
    )
    assert total_ram_kib(text) == pytest.approx(2.0966176847999468e16)
    assert total_ram_kib(text) == (5241544212132178 - 132311) * 4096 / 1024


def test_total_ram_without_reserved_pages() -> None:
    text = "Dec 20 03:17:52 localhost kernel: 75669.637758 5241544212132178 pages RAM"
    assert total_ram_kib(text) == 5241544212132178 * 4096 / 1024


def test_total_ram_ignores_cma_reserved() -> None:
    text = "1000 pages RAM\n0 pages cma reserved\n"
    assert total_ram_kib(text) == 4000.0


def test_total_ram_missing_raises() -> None:
    with pytest.raises(FieldNotFound) as exc:
        total_ram_kib("Free swap  = 0kB")
    assert exc.value.field == "total_ram_kib"


def test_free_swap() -> None:
    assert free_swap_kib("Dec 20 03:17:52 localhost kernel: 75669.636534 Free swap  = 0kB") == 0.0
    assert free_swap_kib("Free swap  = 84kB") == 168.0


def test_slab_unreclaimable_first_occurrence() -> None:
    s = "Dec 20 03:17:52 localhost kernel: 75669.607722  slab_reclaimable:4158 slab_unreclaimable:12849311288"
    assert slab_unreclaimable_kib(s) == 51397245152.0

    zoned = " slab_unreclaimable:10\nNode 0 DMA32 slab_unreclaimable:2796kB\n slab_unreclaimable:99\n"
    assert slab_unreclaimable_kib(zoned) == 40.0


def test_slab_unreclaimable_skips_per_zone_kb_figures() -> None:
    text = "Node 0 DMA32 slab_unreclaimable:2796kB\n slab_unreclaimable:5\n"
    assert slab_unreclaimable_kib(text) == 20.0


def test_hugepages_sums_by_size_class() -> None:
    s = (
        "Dec 20 03:17:52 localhost kernel: 75669.631773 Node 0 hugepages_total=2 hugepages_free=0 "
        "hugepages_surp=0 hugepages_size=1048576kB\n"
        " Dec 20 03:17:52 localhost kernel: 75669.633105 Node 0 hugepages_total=12 hugepages_free=0 "
        "hugepages_surp=0 hugepages_size=2048kB"
    )
    two_mib, one_gib = hugepages_kib(s)
    assert two_mib == pytest.approx(24000.0)
    assert one_gib == pytest.approx(2048000.0)


def test_hugepages_multiple_nodes_and_absent() -> None:
    s = (
        "Node 0 hugepages_total=1 hugepages_free=0 hugepages_surp=0 hugepages_size=2048kB\n"
        "Node 1 hugepages_total=3 hugepages_free=0 hugepages_surp=0 hugepages_size=2048kB\n"
    )
    assert hugepages_kib(s) == (pytest.approx(8000.0), 0.0)
    assert hugepages_kib("no huge pages here") == (0.0, 0.0)


def test_shared_memory() -> None:
    s = "Dec 20 03:17:52 localhost kernel: 75669.607722  mapped:70 shmem:147 pagetables:2089 bounce:0"
    assert shared_kib(s) == 588.0


def test_shared_memory_ignores_shmem_thp_and_zone_figures() -> None:
    s = "Node 0 shmem:78160kB shmem_thp: 0kB\n mapped:1 shmem:10 pagetables:2\n"
    assert shared_kib(s) == 40.0


def test_extract_metrics_from_report(syslog_oom: str) -> None:
    segment = extract_report(locate_last_episode(syslog_oom))
    metrics = extract_metrics(clean_segment(segment.text))

    assert metrics.total_ram_kib == 2097152.0
    assert metrics.free_swap_kib == 0.0
    assert metrics.slab_unreclaimable_kib == 1048576.0
    assert metrics.slab_reclaimable_kib == 16632.0
    assert metrics.shared_kib == 588.0
    assert metrics.hugepages_2m_kib == pytest.approx(24000.0)
    assert metrics.hugepages_1g_kib == pytest.approx(2048000.0)
    assert metrics.total_swap_kib is None
    assert metrics.reserved_pages is None
    assert metrics.percent_of_ram(metrics.slab_unreclaimable_kib) == 50.0


@pytest.mark.parametrize(
    ("missing", "field"),
    [
        ("pages RAM", "total_ram_kib"),
        ("Free swap", "free_swap_kib"),
        ("slab_unreclaimable", "slab_unreclaimable_kib"),
        ("shmem", "shared_kib"),
    ],
)
def test_extract_metrics_mandatory_missing(missing: str, field: str) -> None:
    lines = (
        "Free swap  = 10kB",
        "100 pages RAM",
        "slab_reclaimable:1 slab_unreclaimable:2",
        "mapped:1 shmem:3",
    )
    block = CleanedBlock(lines=tuple(line for line in lines if missing not in line))
    with pytest.raises(MandatoryFieldMissing) as exc:
        extract_metrics(block)
    assert exc.value.field == field
    assert isinstance(exc.value.__cause__, FieldNotFound)


def test_extract_metrics_optional_missing_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    block = CleanedBlock(lines=("Free swap  = 10kB", "100 pages RAM", "slab_unreclaimable:2", "shmem:3"))
    with caplog.at_level(logging.INFO, logger="mcp_oom_triage_server.core.metrics"):
        metrics = extract_metrics(block)
    assert metrics.total_swap_kib is None
    assert metrics.slab_reclaimable_kib is None
    assert "total_swap_kib" in caplog.text
