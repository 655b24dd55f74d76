"""Pydantic Schemas — validation for collaborator input and report output.

Invariants:
    - Schemas validate at system boundary (batch files, CLI output)
    - Amounts are Decimal end to end

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence (ADR: DDD boundary)
"""
