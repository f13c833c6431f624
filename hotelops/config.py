"""Hotel operations configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class HotelOpsSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///hotelops.db"
    echo_sql: bool = False
    app_title: str = "Hotel Operations"

    # Backing store: "sql" runs against database_url with in-process trigger
    # rules; "rest" talks to a hosted PostgREST-style store whose triggers run
    # server side.
    store_backend: str = "sql"
    store_url: str = ""
    store_key: str = ""
    store_timeout_seconds: float = 30.0

    # Retry policy for mutating store calls
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 500
    retry_backoff_factor: float = 2.0
    retry_reads: bool = False

    default_page_size: int = 20
    max_page_size: int = 100

    housekeeping_due_hours: int = 3

    sweep_worker_enabled: bool = True
    sweep_interval_seconds: float = 3600.0

    model_config = {"env_prefix": "HOTELOPS_", "env_file": ".env", "extra": "ignore"}

    @property
    def rest_configured(self) -> bool:
        return bool(self.store_url and self.store_key)


settings = HotelOpsSettings()
