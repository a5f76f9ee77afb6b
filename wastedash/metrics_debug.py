from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from wastedash.aggregations import is_noise_vendor
from wastedash.data import UNKNOWN, UNKNOWN_VENDOR, WasteDataset
from wastedash.settings import DashboardSettings


def compute_debug(settings: DashboardSettings, dataset: WasteDataset) -> Dict[str, Any]:
    records: pd.DataFrame = dataset.records
    payload: Dict[str, Any] = {
        "settings": asdict(settings),
        "source": dataset.source,
        "row_counts": {
            "raw_rows": int(dataset.raw_rows),
            "normalized_rows": int(len(records)),
            "rejected_rows": int(dataset.rejected_rows),
            "truncated_lines": int(dataset.truncated_lines),
        },
        "cleaning_checks": {
            "unknown_category_rows": int((records["category"] == UNKNOWN).sum()),
            "unknown_material_rows": int((records["material_type"] == UNKNOWN).sum()),
            "unknown_vendor_rows": int((records["vendor"] == UNKNOWN_VENDOR).sum()),
            "zero_cost_rows": int((records["cost"] == 0).sum()),
        },
        "total_weight_lbs": float(records["weight_lbs"].sum()),
        "year_coverage": [],
        "noise_vendors": [],
    }

    if not records.empty:
        year_cov = (
            records.groupby("year")
            .agg(rows=("weight_lbs", "size"), weight_lbs=("weight_lbs", "sum"))
            .reset_index()
            .sort_values("year")
        )
        payload["year_coverage"] = year_cov.to_dict(orient="records")
        vendors = records["vendor"].drop_duplicates()
        payload["noise_vendors"] = [str(v) for v in vendors if is_noise_vendor(str(v))][:20]
    return payload
