"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with a LEDGER_-prefixed environment variable
    - get_settings() is cached (lru_cache): single instance per process
    - seed_accounts balances are exact decimals

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults match the `demo` command: in-memory ledger, exclusive lock,
      Alice=500 and Bob=300
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from acid_ledger.core.domain_types import ConcurrencyStrategy, IsolationLevel


class Settings(BaseSettings):
    """Ledger settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_", env_file=".env", case_sensitive=False,
    )

    # Isolation
    concurrency_strategy: ConcurrencyStrategy = ConcurrencyStrategy.EXCLUSIVE_LOCK
    lock_timeout_seconds: float | None = Field(default=None, gt=0)
    isolation_level: IsolationLevel = IsolationLevel.REPEATABLE_READ

    # Delegated store
    database_url: str = "sqlite+aiosqlite:///ledger.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Plain postgresql:// URLs use the asyncpg driver."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_busy_timeout_seconds: float = 5.0

    # Transfers
    processing_delay_ms: int = Field(default=0, ge=0)
    seed_accounts: dict[str, Decimal] = {
        "Alice": Decimal("500"),
        "Bob": Decimal("300"),
    }

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
