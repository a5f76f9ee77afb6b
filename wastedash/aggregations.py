"""Aggregation stages over the normalized waste table.

Each stage reads the shared table without modifying it and returns a
JSON-friendly series. Single-field groupings keep the first-seen order of
their labels unless noted otherwise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from wastedash.data import UNKNOWN_VENDOR
from wastedash.settings import TOP_N_DEFAULT

WEIGHT_COL = "weight_lbs"

# account numbers, amounts and similar non-name entries in the vendor column
_NOISE_VENDOR = re.compile(r"[$\d.,()\-]+")


@dataclass(frozen=True)
class AggregatedSeries:
    labels: Tuple[str, ...]
    values: Tuple[float, ...]

    def pairs(self) -> List[Tuple[str, float]]:
        return list(zip(self.labels, self.values))

    def total(self) -> float:
        return float(sum(self.values))


@dataclass(frozen=True)
class NamedSeries:
    name: str
    values: Tuple[float, ...]


@dataclass(frozen=True)
class MultiSeries:
    """Several series sharing one label axis."""

    labels: Tuple[str, ...]
    series: Tuple[NamedSeries, ...]

    def as_dict(self) -> Dict[str, List[float]]:
        return {s.name: list(s.values) for s in self.series}


def _series_from(grouped: pd.Series) -> AggregatedSeries:
    return AggregatedSeries(
        labels=tuple(str(label) for label in grouped.index),
        values=tuple(float(v) for v in grouped.to_numpy()),
    )


def _sum_by(records: pd.DataFrame, col: str) -> pd.Series:
    return records.groupby(col, sort=False)[WEIGHT_COL].sum()


def aggregate_by_category(records: pd.DataFrame) -> AggregatedSeries:
    return _series_from(_sum_by(records, "category"))


def aggregate_by_material_type(records: pd.DataFrame) -> AggregatedSeries:
    return _series_from(_sum_by(records, "material_type"))


def year_axis(records: pd.DataFrame) -> List[int]:
    """Distinct years in ascending numeric order."""
    return sorted(int(y) for y in pd.unique(records["year"]))


def aggregate_yearly_trend(records: pd.DataFrame) -> AggregatedSeries:
    by_year = records.groupby("year", sort=True)[WEIGHT_COL].sum()
    return _series_from(by_year)


def is_noise_vendor(name: str) -> bool:
    if name == UNKNOWN_VENDOR:
        return False
    return bool(_NOISE_VENDOR.fullmatch(name))


def aggregate_top_vendors(records: pd.DataFrame, top_n: int = TOP_N_DEFAULT) -> AggregatedSeries:
    """Vendors ranked by total weight, heaviest first.

    Numeric-looking vendor labels are dropped, except the ``"unknown"``
    bucket. Ties keep first-seen order.
    """
    by_vendor = _sum_by(records, "vendor")
    by_vendor = by_vendor[[not is_noise_vendor(str(name)) for name in by_vendor.index]]
    ranked = by_vendor.sort_values(ascending=False, kind="stable").head(max(0, int(top_n)))
    return _series_from(ranked)


def aggregate_category_by_year(records: pd.DataFrame, years: Optional[Sequence[int]] = None) -> MultiSeries:
    """One series per category (first-seen order) over the ascending year axis.

    Category/year combinations without records are zero.
    """
    years = list(years) if years is not None else year_axis(records)
    categories = list(pd.unique(records["category"]))
    table = (
        records.groupby(["category", "year"], sort=False)[WEIGHT_COL]
        .sum()
        .unstack(fill_value=0.0)
        .reindex(index=categories, columns=years, fill_value=0.0)
    )
    series = tuple(
        NamedSeries(name=str(category), values=tuple(float(v) for v in row))
        for category, row in zip(table.index, table.to_numpy())
    )
    return MultiSeries(labels=tuple(str(y) for y in years), series=series)
