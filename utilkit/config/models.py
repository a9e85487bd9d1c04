"""Environment-driven settings.

Defaults for the cache, the task pool and retries can be supplied through
``UTILKIT_*`` environment variables or a ``.env`` file. Components never read
settings implicitly; callers opt in through the ``from_settings``
constructors.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    default_cache_capacity: int
        Capacity used by ``LRUCache.from_settings``. Defaults to 1024.
    default_max_concurrency: int
        Ceiling used by ``TaskPool.from_settings``. Defaults to 10.
    retry_attempts: int
        Total attempts used by ``RetryConfig.from_settings``. Defaults to 3.
    retry_delay_seconds: float
        Delay before the first retry. Defaults to 1.0.
    retry_backoff_factor: float
        Delay multiplier per retry. Defaults to 2.0.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="UTILKIT_")

    log_level: str = Field("INFO")
    default_cache_capacity: int = Field(
        1024, ge=1, description="Default LRU cache capacity"
    )
    default_max_concurrency: int = Field(
        10, ge=1, description="Default task pool concurrency ceiling"
    )
    retry_attempts: int = Field(
        3, ge=1, description="Total attempts, including the first one"
    )
    retry_delay_seconds: float = Field(
        1.0, ge=0.0, description="Delay before the first retry in seconds"
    )
    retry_backoff_factor: float = Field(
        2.0, ge=1.0, description="Delay multiplier per retry"
    )
