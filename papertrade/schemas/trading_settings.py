"""Pydantic schemas for the account TradingSettings API."""

from datetime import datetime
from pydantic import BaseModel, Field, model_validator


class TradingSettingsCreate(BaseModel):
    """Full, validated settings. Also used to check merged partial updates."""

    initial_capital: float = Field(default=100000.0, gt=0)
    current_balance: float = Field(default=100000.0, ge=0)
    stop_loss_percent: float = Field(default=1.5, gt=0, lt=100)
    trailing_target_percent: float = Field(default=9.0, ge=0, lt=100)
    trailing_activation_percent: float = Field(default=1.0, ge=0)
    default_position_size_percent: float = Field(default=10.0, gt=0, le=100)
    max_trades_per_day: int = Field(default=5, ge=0)  # 0 = unlimited

    @model_validator(mode="after")
    def _validate_relationships(self):
        if self.trailing_target_percent and self.trailing_target_percent <= self.trailing_activation_percent:
            raise ValueError("trailing_target_percent must exceed trailing_activation_percent")
        return self


class TradingSettingsUpdate(BaseModel):
    initial_capital: float | None = Field(default=None, gt=0)
    current_balance: float | None = Field(default=None, ge=0)
    stop_loss_percent: float | None = Field(default=None, gt=0, lt=100)
    trailing_target_percent: float | None = Field(default=None, ge=0, lt=100)
    trailing_activation_percent: float | None = Field(default=None, ge=0)
    default_position_size_percent: float | None = Field(default=None, gt=0, le=100)
    max_trades_per_day: int | None = Field(default=None, ge=0)


class TradingSettingsRead(BaseModel):
    id: int
    account_id: str
    initial_capital: float
    current_balance: float
    stop_loss_percent: float
    trailing_target_percent: float
    trailing_activation_percent: float
    default_position_size_percent: float
    max_trades_per_day: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
