"""Dashboard load pipeline.

A load fetches and normalizes the CSV once, then runs the five chart stages
against the shared table. Each chart has its own result slot so a renderer
can show finished charts while the rest are still being computed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from wastedash.aggregations import (
    aggregate_by_category,
    aggregate_by_material_type,
    aggregate_category_by_year,
    aggregate_top_vendors,
    aggregate_yearly_trend,
    year_axis,
)
from wastedash.charts import BLUE, GREEN, PINK, bar_chart, line_chart, multi_line_chart, pie_chart
from wastedash.data import WasteDataset, load_waste_data
from wastedash.errors import WasteDataError
from wastedash.settings import DashboardSettings

logger = logging.getLogger(__name__)

StageFn = Callable[[pd.DataFrame, List[int], DashboardSettings], Dict[str, Any]]


def _category_weight(records: pd.DataFrame, years: List[int], settings: DashboardSettings) -> Dict[str, Any]:
    return bar_chart("category_weight", "Total Weight by Category", aggregate_by_category(records), PINK)


def _material_type_distribution(records: pd.DataFrame, years: List[int], settings: DashboardSettings) -> Dict[str, Any]:
    return pie_chart("material_type_distribution", "Material Type Distribution", aggregate_by_material_type(records))


def _yearly_trend(records: pd.DataFrame, years: List[int], settings: DashboardSettings) -> Dict[str, Any]:
    return line_chart("yearly_trend", "Total Waste Weight Trend Over Years", aggregate_yearly_trend(records), GREEN)


def _top_vendors(records: pd.DataFrame, years: List[int], settings: DashboardSettings) -> Dict[str, Any]:
    return bar_chart(
        "top_vendors",
        f"Top {settings.top_n} Vendors by Weight",
        aggregate_top_vendors(records, settings.top_n),
        BLUE,
        horizontal=True,
    )


def _category_trends_over_years(records: pd.DataFrame, years: List[int], settings: DashboardSettings) -> Dict[str, Any]:
    return multi_line_chart(
        "category_trends_over_years",
        "Waste Category Trends Over Years (lbs)",
        aggregate_category_by_year(records, years),
    )


STAGES: Dict[str, StageFn] = {
    "category_weight": _category_weight,
    "material_type_distribution": _material_type_distribution,
    "yearly_trend": _yearly_trend,
    "top_vendors": _top_vendors,
    "category_trends_over_years": _category_trends_over_years,
}
CHART_NAMES = tuple(STAGES)


class SlotStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass
class ResultSlot:
    name: str
    status: SlotStatus = SlotStatus.PENDING
    payload: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class DashboardState:
    """Published results of the most recent load.

    Every load gets a generation number from ``begin_load``. Writes tagged
    with any other generation are ignored, so a superseded load can never
    overwrite the results of a newer one. Each slot is written at most once
    per generation.
    """

    def __init__(self, names: Sequence[str] = CHART_NAMES) -> None:
        self._lock = threading.RLock()
        self._names = tuple(names)
        self.generation = 0
        self.loading = False
        self.failure: Optional[WasteDataError] = None
        self.dataset: Optional[WasteDataset] = None
        self.slots: Dict[str, ResultSlot] = {name: ResultSlot(name) for name in self._names}

    @property
    def error(self) -> Optional[str]:
        return self.failure.message if self.failure is not None else None

    def begin_load(self) -> int:
        with self._lock:
            self.generation += 1
            self.loading = True
            self.failure = None
            self.dataset = None
            self.slots = {name: ResultSlot(name) for name in self._names}
            return self.generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self.generation

    def set_dataset(self, generation: int, dataset: WasteDataset) -> bool:
        with self._lock:
            if not self.is_current(generation):
                return False
            self.dataset = dataset
            return True

    def publish(self, generation: int, name: str, payload: Dict[str, Any]) -> bool:
        with self._lock:
            slot = self.slots.get(name)
            if not self.is_current(generation) or slot is None or slot.status is not SlotStatus.PENDING:
                return False
            slot.status = SlotStatus.READY
            slot.payload = payload
            return True

    def fail_slot(self, generation: int, name: str, message: str) -> bool:
        with self._lock:
            slot = self.slots.get(name)
            if not self.is_current(generation) or slot is None or slot.status is not SlotStatus.PENDING:
                return False
            slot.status = SlotStatus.FAILED
            slot.error = message
            return True

    def fail(self, generation: int, failure: WasteDataError) -> bool:
        """Record a fatal load error; no chart data survives it."""
        with self._lock:
            if not self.is_current(generation):
                return False
            self.failure = failure
            self.loading = False
            self.dataset = None
            for slot in self.slots.values():
                slot.status = SlotStatus.FAILED
                slot.payload = None
                slot.error = failure.message
            return True

    def finish(self, generation: int) -> bool:
        with self._lock:
            if not self.is_current(generation):
                return False
            self.loading = False
            return True

    def charts(self) -> Dict[str, Optional[Dict[str, Any]]]:
        with self._lock:
            return {name: slot.payload for name, slot in self.slots.items()}

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "generation": self.generation,
                "loading": self.loading,
                "error": self.error,
                "error_type": type(self.failure).__name__ if self.failure is not None else None,
                "slots": {name: {"status": slot.status.value, "error": slot.error} for name, slot in self.slots.items()},
            }


def run_pipeline(
    settings: DashboardSettings,
    state: Optional[DashboardState] = None,
    *,
    loader: Callable[[DashboardSettings], WasteDataset] = load_waste_data,
    on_publish: Optional[Callable[[ResultSlot], None]] = None,
) -> DashboardState:
    state = state if state is not None else DashboardState()
    generation = state.begin_load()

    try:
        dataset = loader(settings)
    except WasteDataError as exc:
        logger.exception("Dashboard load failed for %s", settings.csv_source)
        state.fail(generation, exc)
        return state

    if not state.set_dataset(generation, dataset):
        return state

    years = year_axis(dataset.records)
    for name, stage in STAGES.items():
        try:
            payload = stage(dataset.records, years, settings)
        except Exception as exc:
            logger.exception("Chart stage %s failed", name)
            state.fail_slot(generation, name, f"{type(exc).__name__}: {exc}")
            continue
        if state.publish(generation, name, payload) and on_publish is not None:
            on_publish(state.slots[name])

    state.finish(generation)
    return state
