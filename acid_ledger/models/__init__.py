"""ORM Models — SQLAlchemy declarative models for the delegated store.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all runs
"""

from acid_ledger.models.account import Account  # noqa: F401
