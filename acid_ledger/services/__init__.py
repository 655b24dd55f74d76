"""Services Layer — transfer orchestration and the ledger facade.

Invariants:
    - TransferTransaction never lets a LedgerError escape; it returns an outcome
    - LedgerService is the only entry point collaborators call

Design Decisions:
    - Shell awaits IO around pure rules from core/ (ADR: impureim sandwich)
"""
