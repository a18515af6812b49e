"""TradingSettings model — per-account risk configuration and webhook secret."""

from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

from papertrade.utils.constants import (
    DEFAULT_INITIAL_CAPITAL,
    DEFAULT_MAX_TRADES_PER_DAY,
    DEFAULT_POSITION_SIZE_PCT,
    DEFAULT_STOP_LOSS_PCT,
    DEFAULT_TRAILING_ACTIVATION_PCT,
    DEFAULT_TRAILING_TARGET_PCT,
)


class TradingSettings(SQLModel, table=True):
    __tablename__ = "trading_settings"

    id: int | None = Field(default=None, primary_key=True)
    account_id: str = Field(unique=True, index=True)

    # Capital
    initial_capital: float = DEFAULT_INITIAL_CAPITAL
    current_balance: float = DEFAULT_INITIAL_CAPITAL

    # Risk
    stop_loss_percent: float = DEFAULT_STOP_LOSS_PCT
    trailing_target_percent: float = DEFAULT_TRAILING_TARGET_PCT  # 0 = no hard target
    trailing_activation_percent: float = DEFAULT_TRAILING_ACTIVATION_PCT
    default_position_size_percent: float = DEFAULT_POSITION_SIZE_PCT
    max_trades_per_day: int = DEFAULT_MAX_TRADES_PER_DAY

    # Authenticates inbound webhook signals; never returned by the read API
    webhook_secret: str = Field(default="", index=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
