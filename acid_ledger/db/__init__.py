"""Database Layer — SQLAlchemy Base and column types for the delegated store.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - aiosqlite for local runs and tests, asyncpg for PostgreSQL (ADR: native async)
"""
