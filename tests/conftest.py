from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

# Two episodes; only the second one (java) must be analyzed. Mem-Info arrives with
# rsyslog "#012" escapes and the slab-detail table is present.
SYSLOG_OOM = "\n".join(
    [
        "Dec 20 03:10:00 localhost kernel: oldproc invoked oom-killer: gfp_mask=0x14200ca, order=0, oom_score_adj=0",
        "Dec 20 03:10:00 localhost kernel: 1 pages RAM",
        "Dec 20 03:10:00 localhost kernel: Out of memory: Killed process 100 (oldproc)",
        "Dec 20 03:17:52 localhost kernel: java invoked oom-killer: gfp_mask=0x100cca(GFP_HIGHUSER_MOVABLE), order=0, oom_score_adj=0",
        "Dec 20 03:17:52 localhost kernel: CPU: 1 PID: 3100 Comm: java Not tainted 5.4.0-42-generic #46-Ubuntu",
        "Dec 20 03:17:52 localhost kernel: Mem-Info:",
        "Dec 20 03:17:52 localhost kernel: active_anon:100 inactive_anon:200 isolated_anon:0#012 active_file:10 inactive_file:20 isolated_file:0#012 slab_reclaimable:4158 slab_unreclaimable:262144#012 mapped:70 shmem:147 pagetables:2089 bounce:0",
        "Dec 20 03:17:52 localhost kernel: Node 0 DMA32 free:59728kB shmem:5140kB slab_unreclaimable:2796kB",
        "Dec 20 03:17:52 localhost kernel: Node 0 hugepages_total=2 hugepages_free=0 hugepages_surp=0 hugepages_size=1048576kB",
        "Dec 20 03:17:52 localhost kernel: Node 0 hugepages_total=12 hugepages_free=0 hugepages_surp=0 hugepages_size=2048kB",
        "Dec 20 03:17:52 localhost kernel: Free swap  = 0kB",
        "Dec 20 03:17:52 localhost kernel: 524288 pages RAM",
        "Dec 20 03:17:52 localhost kernel: Unreclaimable slab info:",
        "Dec 20 03:17:52 localhost kernel: Name                      Used          Total",
        "Dec 20 03:17:52 localhost kernel: kmalloc-8192              1028KB       1028KB",
        "Dec 20 03:17:52 localhost kernel: dentry                    4096KB       8192KB",
        "Dec 20 03:17:52 localhost kernel: kmalloc-64                 512KB        512KB",
        "Dec 20 03:17:52 localhost kernel: Tasks state (memory values in pages):",
        "Dec 20 03:17:52 localhost kernel: [ pid ]   uid  tgid total_vm      rss pgtables_bytes swapents oom_score_adj name",
        "Dec 20 03:17:52 localhost kernel: [  199]     0   199    14838      226   102400       14          -250 systemd-journal",
        "Dec 20 03:17:52 localhost kernel: [  255]     0   255     5316      159    69632       37         -1000 systemd-udevd",
        "Dec 20 03:17:52 localhost kernel: [ 3100]  1000  3100  1500000   200000  2300000        0             0 java",
        "Dec 20 03:17:52 localhost kernel: [ 3101]  1000  3101  1500000   200000  2300000        0             0 java",
        "Dec 20 03:17:52 localhost kernel: oom-kill:constraint=CONSTRAINT_NONE,nodemask=(null),cpuset=/,mems_allowed=0,global_oom,task=java,pid=3100,uid=1000",
        "Dec 20 03:17:52 localhost kernel: Out of memory: Killed process 3100 (java) total-vm:6000000kB, anon-rss:800000kB",
        "Dec 20 03:17:53 localhost systemd[1]: java.service: Main process exited, code=killed",
    ]
) + "\n"

CGROUP_OOM = "\n".join(
    [
        "Jan 10 10:00:00 host kernel: java invoked oom-killer: gfp_mask=0xcc0(GFP_KERNEL), order=0, oom_score_adj=0",
        "Jan 10 10:00:00 host kernel: Memory cgroup out of memory: Killed process 3000 (java)",
        "Jan 10 10:05:00 host kernel: java invoked oom-killer: gfp_mask=0xcc0(GFP_KERNEL), order=0, oom_score_adj=0",
        "Jan 10 10:05:00 host kernel: memory: usage 1048576kB, limit 1048576kB, failcnt 512",
        "Jan 10 10:05:00 host kernel: Memory cgroup stats for /docker/abc:",
        "Jan 10 10:05:00 host kernel: Tasks state (memory values in pages):",
        "Jan 10 10:05:00 host kernel: [  pid  ]   uid  tgid total_vm      rss pgtables_bytes swapents oom_score_adj name",
        "Jan 10 10:05:00 host kernel: [   3100]  1000  3100  1500000   262000  2300000        0             0 java",
        "Jan 10 10:05:00 host kernel: oom-kill:constraint=CONSTRAINT_MEMCG,nodemask=(null),task=java,pid=3100,uid=1000",
        "Jan 10 10:05:00 host kernel: Memory cgroup out of memory: Killed process 3100 (java) total-vm:6000000kB",
    ]
) + "\n"


@pytest.fixture
def syslog_oom() -> str:
    return SYSLOG_OOM


@pytest.fixture
def cgroup_oom() -> str:
    return CGROUP_OOM


@pytest.fixture
def write_log() -> Callable[[Path, str], None]:
    def _write(path: Path, text: str) -> None:
        path.write_text(text, encoding="utf-8")

    return _write
