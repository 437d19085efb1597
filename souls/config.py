"""Souls Settings — database, password hashing cost, CORS, and logging.

Invariants:
    - Every value can be overridden from the environment or a .env file
    - get_settings() is cached (lru_cache), so one Settings per process
    - Password cost settings are fixed for the lifetime of stored credentials:
      credentials hashed under other costs no longer verify

Design Decisions:
    - Argon2id costs live here, not in core: core/credentials.py stays pure and
      receives them as a HashParams value
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from souls.core.credentials import HashParams


class Settings(BaseSettings):
    """Souls API settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Storage
    database_url: str = "postgresql+asyncpg://souls:souls@db:5432/souls"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Credential Manager (Argon2id)
    password_time_cost: int = Field(3, ge=1)
    password_memory_cost: int = Field(65536, ge=8)  # KiB
    password_parallelism: int = Field(4, ge=1)

    @model_validator(mode="after")
    def memory_covers_lanes(self) -> "Settings":
        if self.password_memory_cost < 8 * self.password_parallelism:
            raise ValueError("password_memory_cost must be at least 8 KiB per lane")
        return self

    # HTTP
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def hash_params(self) -> HashParams:
        return HashParams(
            time_cost=self.password_time_cost,
            memory_cost=self.password_memory_cost,
            parallelism=self.password_parallelism,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
