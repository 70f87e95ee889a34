"""Report configuration with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Literal

from .ranking import DEFAULT_TOP_N

DisplayUnit = Literal["MiB", "GiB"]
DISPLAY_UNITS: tuple[str, ...] = ("MiB", "GiB")

TOP_N_ENV = "OOM_TRIAGE_TOP_N"
DISPLAY_UNIT_ENV = "OOM_TRIAGE_DISPLAY_UNIT"


@dataclass(frozen=True, slots=True)
class ReportConfig:
    top_n: int = DEFAULT_TOP_N
    display_unit: DisplayUnit = "GiB"


def _env_top_n() -> int | None:
    env = os.getenv(TOP_N_ENV)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{TOP_N_ENV} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{TOP_N_ENV} must be >= 1")
    return value


def _env_display_unit() -> str | None:
    env = os.getenv(DISPLAY_UNIT_ENV)
    if env is None or env == "":
        return None
    for unit in DISPLAY_UNITS:
        if env.lower() == unit.lower():
            return unit
    raise ValueError(f"{DISPLAY_UNIT_ENV} must be one of: {', '.join(DISPLAY_UNITS)}")


def resolve_report_config(cfg: ReportConfig | None = None) -> ReportConfig:
    """Return config with optional env overrides applied.

    Env values only replace defaults; an explicitly passed config wins.
    """
    if cfg is not None:
        if cfg.top_n < 1:
            raise ValueError("top_n must be >= 1")
        if cfg.display_unit not in DISPLAY_UNITS:
            raise ValueError(f"display_unit must be one of: {', '.join(DISPLAY_UNITS)}")
        return cfg

    cfg = ReportConfig()
    top_n = _env_top_n()
    if top_n is not None:
        cfg = replace(cfg, top_n=top_n)
    unit = _env_display_unit()
    if unit is not None:
        cfg = replace(cfg, display_unit=unit)
    return cfg
