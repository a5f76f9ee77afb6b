from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardResponse, DashboardSettingsModel, MetaListResponse, MetaSourceResponse
from wastedash.data import RAW_COLUMNS, is_remote_source, load_waste_data, to_csv_bytes
from wastedash.errors import EmptyResult, FetchFailure, ParseFailure, WasteDataError
from wastedash.metrics_debug import compute_debug
from wastedash.pipeline import CHART_NAMES, run_pipeline
from wastedash.settings import DashboardSettings, normalize_settings


app = FastAPI(title="Waste Data Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_STATUS = {FetchFailure: 502, ParseFailure: 422, EmptyResult: 422}


def _settings_from_model(model: DashboardSettingsModel) -> DashboardSettings:
    return normalize_settings(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    status_code = next((code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    message = exc.message if isinstance(exc, WasteDataError) else str(exc)
    return JSONResponse(status_code=status_code, content={"error": message, "type": type(exc).__name__})


@app.get("/meta/source")
def meta_source():
    settings = normalize_settings({})
    body = MetaSourceResponse(csv_source=settings.csv_source, remote=is_remote_source(settings.csv_source))
    return _json(body.model_dump())


@app.get("/meta/columns")
def meta_columns():
    return _json(MetaListResponse(values=list(RAW_COLUMNS)).model_dump())


@app.get("/meta/charts")
def meta_charts():
    return _json(MetaListResponse(values=list(CHART_NAMES)).model_dump())


@app.post("/dashboard")
def dashboard(settings: DashboardSettingsModel):
    try:
        state = run_pipeline(_settings_from_model(settings))
        if state.failure is not None:
            return _error(state.failure)
        body = DashboardResponse.model_validate({**state.snapshot(), "charts": state.charts()})
        return _json(body.model_dump())
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/charts/{name}")
def chart(name: str, settings: DashboardSettingsModel):
    if name not in CHART_NAMES:
        return JSONResponse(status_code=404, content={"error": f"Unknown chart: {name}", "type": "NotFound"})
    try:
        state = run_pipeline(_settings_from_model(settings))
        if state.failure is not None:
            return _error(state.failure)
        slot = state.slots[name]
        if slot.payload is None:
            return JSONResponse(status_code=500, content={"error": slot.error, "type": "ChartFailed"})
        return _json(slot.payload)
    except Exception as exc:
        logger.exception("chart %s failed", name)
        return _error(exc)


@app.post("/debug")
def debug(settings: DashboardSettingsModel):
    try:
        f = _settings_from_model(settings)
        return _json(compute_debug(f, load_waste_data(f)))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/normalized")
def export_normalized(settings: DashboardSettingsModel):
    try:
        dataset = load_waste_data(_settings_from_model(settings))
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)
    return Response(
        content=to_csv_bytes(dataset),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=normalized_wastedata.csv"},
    )
