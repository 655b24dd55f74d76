"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, db/ or models/
    - Functions are pure and deterministic; IO boundaries are Protocols

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
