"""Infrastructure Layer — storage, isolation strategies and cross-cutting concerns.

Invariants:
    - Every store failure is mapped onto the core error hierarchy
    - Ledger writes only happen inside a scope handed out by a controller

Design Decisions:
    - Concurrency policy lives here, storage primitives stay lock-free
"""
