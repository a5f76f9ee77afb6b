from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


PROJECT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CSV_NAME = "cleaned_wastedata_final.csv"
CSV_SOURCE_ENV = "WASTEDASH_CSV_SOURCE"

TOP_N_DEFAULT = 10
TOP_N_MAX = 50
FETCH_TIMEOUT_DEFAULT = 30.0


def default_csv_source() -> str:
    return os.environ.get(CSV_SOURCE_ENV) or str(PROJECT_DIR / DEFAULT_CSV_NAME)


@dataclass(frozen=True)
class DashboardSettings:
    csv_source: str = field(default_factory=default_csv_source)
    top_n: int = TOP_N_DEFAULT
    fetch_timeout: float = FETCH_TIMEOUT_DEFAULT


def _as_positive_float(value: object, default: float) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return out if out > 0 else default


def normalize_settings(raw: Optional[dict]) -> DashboardSettings:
    raw = raw or {}

    csv_source = str(raw.get("csv_source") or "").strip() or default_csv_source()

    top_n = raw.get("top_n", TOP_N_DEFAULT)
    try:
        top_n = int(top_n)
    except (TypeError, ValueError):
        top_n = TOP_N_DEFAULT
    top_n = max(1, min(TOP_N_MAX, top_n))

    fetch_timeout = _as_positive_float(raw.get("fetch_timeout", FETCH_TIMEOUT_DEFAULT), FETCH_TIMEOUT_DEFAULT)
    return DashboardSettings(csv_source=csv_source, top_n=top_n, fetch_timeout=fetch_timeout)
