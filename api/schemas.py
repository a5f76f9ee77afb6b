from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from wastedash.settings import FETCH_TIMEOUT_DEFAULT, TOP_N_DEFAULT


class DashboardSettingsModel(BaseModel):
    csv_source: Optional[str] = None
    top_n: int = TOP_N_DEFAULT
    fetch_timeout: float = FETCH_TIMEOUT_DEFAULT


class SlotStatusModel(BaseModel):
    status: str
    error: Optional[str] = None


class DashboardResponse(BaseModel):
    generation: int
    loading: bool
    error: Optional[str] = None
    error_type: Optional[str] = None
    slots: Dict[str, SlotStatusModel] = Field(default_factory=dict)
    charts: Dict[str, Optional[Dict[str, Any]]] = Field(default_factory=dict)


class MetaSourceResponse(BaseModel):
    csv_source: str
    remote: bool


class MetaListResponse(BaseModel):
    values: List[str]
