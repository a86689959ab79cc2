"""Core (UI-agnostic) training analytics logic.

This package contains:
- record normalization and directory merge (raw rows -> MergedRecord)
- tenure classification and multi-select filtering
- aggregation by dimension and per-employee rollups
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
