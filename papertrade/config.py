"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = "sqlite:///./papertrade.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server
    public_base_url: str = "http://localhost:8000"  # used to build webhook URLs

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Shared secret for POST /api/ticks; empty disables the check
    feed_token: str = ""

    # Position sizing: quantity is floored to this step, 0 = fractional
    equity_quantity_step: float = 1.0
    forex_quantity_step: float = 0.0

    # Exit fills: "order" fills at the stop/target price, "tick" at the triggering price
    exit_fill_policy: str = "order"
    trailing_overrides_target: bool = False

    # Price monitor job
    monitor_enabled: bool = True
    monitor_interval_seconds: int = 5

    model_config = {"env_prefix": "PT_", "env_file": ".env"}


settings = Settings()
