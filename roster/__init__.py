"""Core (UI-agnostic) student dashboard logic.

This package contains:
- data loading (CSV / XLSX -> pandas) and row normalization
- age estimation from loosely formatted dates of birth
- filter normalization and the filter engine
- aggregation and page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
