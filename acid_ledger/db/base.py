"""SQLAlchemy Declarative Base — metadata for the delegated transactional store.

Invariants:
    - Account (models/account.py) is registered on Base.metadata before create_schema runs
    - Constraint names are deterministic on every backend (uq_accounts_name, pk_accounts)

Design Decisions:
    - Own module for Base: models and the session manager import it without a cycle
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
