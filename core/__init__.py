"""Core (UI-agnostic) resource navigator logic.

This package contains:
- record normalization and catalog loading (JSON/CSV -> pandas -> dataclasses)
- the selection state machine
- the filter engine
- the URL query-string codec
- chart helpers (Altair -> Vega-Lite spec dict)
"""
