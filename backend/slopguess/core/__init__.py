"""Core Layer - pure domain logic: similarity, scoring, templates, lifecycle rules.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - No IO; everything here is deterministic given its inputs
"""
