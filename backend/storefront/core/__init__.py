"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions here are pure and deterministic; IO enters only through repository_protocols

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
