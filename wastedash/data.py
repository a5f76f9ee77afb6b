from __future__ import annotations

import csv
import io
import logging
import math
import re
import warnings
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd
import requests

from wastedash.errors import EmptyResult, FetchFailure, ParseFailure
from wastedash.settings import FETCH_TIMEOUT_DEFAULT, DashboardSettings

logger = logging.getLogger(__name__)

RAW_COLUMNS = {
    "Year": "year",
    "Month": "month",
    "Day": "day",
    "Category": "category",
    "Material Type": "material_type",
    "Weight (lbs)": "weight_lbs",
    "Vendor": "vendor",
    "Date Updated": "date_updated",
    "Cost": "cost",
    "Notes": "notes",
}
NORMALIZED_COLUMNS = list(RAW_COLUMNS.values())

UNKNOWN = "Unknown"
UNKNOWN_VENDOR = "unknown"
TEXT_DEFAULTS = {
    "month": UNKNOWN,
    "day": UNKNOWN,
    "category": UNKNOWN,
    "material_type": UNKNOWN,
    "vendor": UNKNOWN_VENDOR,
    "date_updated": UNKNOWN,
    "notes": UNKNOWN,
}

_YEAR_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_COST_DISALLOWED = re.compile(r"[^0-9$.\-]+")
_INT64 = np.iinfo(np.int64)


@dataclass(frozen=True, eq=False)
class WasteDataset:
    """Normalized waste table plus load bookkeeping.

    ``records`` is shared by every aggregation stage and is never mutated
    after the dataset is built.
    """

    records: pd.DataFrame
    source: str
    raw_rows: int
    rejected_rows: int
    truncated_lines: int = 0


def is_remote_source(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def source_signature(source: str) -> Optional[Tuple[str, float, int]]:
    """Cache key for local files; remote sources are never memoized."""
    if is_remote_source(source):
        return None
    path = Path(source)
    if not path.is_file():
        return None
    stat = path.stat()
    return (str(path.resolve()), stat.st_mtime, stat.st_size)


def parse_year(value: object) -> Optional[int]:
    """Parse the leading base-10 integer of ``value`` (``"2020.0"`` -> 2020)."""
    if value is None:
        return None
    match = _YEAR_PREFIX.match(str(value))
    if not match:
        return None
    year = int(match.group(1))
    # must fit the int64 year column
    if not _INT64.min <= year <= _INT64.max:
        return None
    return year


def parse_weight(value: object) -> Optional[float]:
    """Parse a weight in pounds, ignoring thousands separators."""
    if value is None:
        return None
    match = _NUMBER_PREFIX.match(str(value).replace(",", ""))
    if not match:
        return None
    out = float(match.group(1))
    if not math.isfinite(out):
        return None
    return out


def parse_cost(value: object) -> float:
    """Parse a cost; anything unparsable counts as zero."""
    if value is None:
        return 0.0
    cleaned = _COST_DISALLOWED.sub("", str(value))
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0.0
    out = float(match.group(1))
    return out if math.isfinite(out) else 0.0


def fetch_csv_text(source: str, *, timeout: float = FETCH_TIMEOUT_DEFAULT) -> str:
    if is_remote_source(source):
        try:
            response = requests.get(source, timeout=timeout)
        except requests.RequestException as exc:
            raise FetchFailure(source, reason=str(exc)) from exc
        if not 200 <= response.status_code < 300:
            raise FetchFailure(source, status=response.status_code)
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseFailure(str(exc)) from exc
    except OSError as exc:
        raise FetchFailure(source, reason=str(exc)) from exc


def _scan_lines(text: str) -> Tuple[int, int]:
    """Header width and the number of records with more fields than it."""
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None:
        return 0, 0
    width = len(header)
    return width, sum(1 for fields in reader if len(fields) > width)


def parse_csv_text(text: str) -> Tuple[pd.DataFrame, int]:
    """Tokenize CSV text into an all-text frame.

    Lines with more fields than the header are kept, cut down to the header
    columns. Returns the frame and the number of lines that were cut.
    """
    text = text.lstrip("\ufeff")
    try:
        width, truncated = _scan_lines(text)
        with warnings.catch_warnings():
            # depending on the pandas version, index_col=False truncates long lines itself and warns
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                na_filter=False,
                skip_blank_lines=True,
                index_col=False,
                engine="python",
                on_bad_lines=lambda fields: fields[:width],
            )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=list(RAW_COLUMNS)), 0
    except (pd.errors.ParserError, csv.Error) as exc:
        raise ParseFailure(str(exc)) from exc
    if truncated:
        logger.warning("%d CSV lines had more fields than the header; extra fields dropped.", truncated)
    return df.fillna(""), truncated


def _text_column(raw: pd.DataFrame, col: str) -> pd.Series:
    if col not in raw.columns:
        return pd.Series([""] * len(raw), index=raw.index, dtype=object)
    return raw[col].astype(str)


def normalize_records(raw: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
    """Coerce raw CSV rows into the normalized table.

    Rows whose year or weight cannot be parsed are dropped and logged;
    order of the surviving rows is preserved. Returns the table and the
    number of rejected rows.
    """
    raw_year = _text_column(raw, "Year")
    raw_weight = _text_column(raw, "Weight (lbs)")
    years = raw_year.map(parse_year)
    weights = raw_weight.map(parse_weight)

    rejected = years.isna() | weights.isna()
    for year_text, weight_text in zip(raw_year[rejected], raw_weight[rejected]):
        logger.warning("Invalid row skipped: Year=%s, Weight=%s", year_text, weight_text)

    keep = ~rejected
    out = pd.DataFrame(index=raw.index[keep])
    out["year"] = years[keep].astype("int64")
    for raw_col, col in RAW_COLUMNS.items():
        if col in TEXT_DEFAULTS:
            text = _text_column(raw, raw_col)[keep]
            out[col] = text.where(text != "", TEXT_DEFAULTS[col])
    out["weight_lbs"] = weights[keep].astype("float64")
    out["cost"] = _text_column(raw, "Cost")[keep].map(parse_cost).astype("float64")
    out = out[NORMALIZED_COLUMNS].reset_index(drop=True)
    return out, int(rejected.sum())


def build_dataset(text: str, source: str) -> WasteDataset:
    raw, truncated_lines = parse_csv_text(text)
    records, rejected_rows = normalize_records(raw)
    if records.empty:
        logger.warning("No processable data found from %s.", source)
        raise EmptyResult(source)
    return WasteDataset(
        records=records,
        source=source,
        raw_rows=int(len(raw)),
        rejected_rows=rejected_rows,
        truncated_lines=truncated_lines,
    )


@lru_cache(maxsize=4)
def _load_waste_data_cached(source: str, timeout: float, signature: Tuple[str, float, int]) -> WasteDataset:
    return build_dataset(fetch_csv_text(source, timeout=timeout), source)


def load_waste_data(settings: DashboardSettings) -> WasteDataset:
    source = settings.csv_source
    signature = source_signature(source)
    if signature is None:
        return build_dataset(fetch_csv_text(source, timeout=settings.fetch_timeout), source)
    return _load_waste_data_cached(source, settings.fetch_timeout, signature)


def clear_cache() -> None:
    _load_waste_data_cached.cache_clear()


def to_csv_bytes(dataset: WasteDataset) -> bytes:
    return dataset.records.to_csv(index=False).encode("utf-8")
