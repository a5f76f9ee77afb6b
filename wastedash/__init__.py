"""Core (UI-agnostic) waste dashboard logic.

This package contains:
- data loading (CSV -> pandas) and row normalization
- settings normalization
- aggregation stages (JSON-serializable series)
- chart helpers (series -> chart payloads + Altair Vega-Lite spec dicts)
- the load pipeline with per-chart result slots
"""
