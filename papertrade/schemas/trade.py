"""Pydantic schemas for Trade read models and close commands."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class TradeRead(BaseModel):
    id: str
    account_id: str
    symbol: str
    segment: str
    direction: str
    quantity: float
    entry_price: float
    initial_sl_price: float
    current_sl_price: float
    target_price: float | None
    status: str
    trailing_activated: bool
    current_price: float | None
    exit_price: float | None
    pnl: float | None
    pnl_percent: float | None
    signal_source: str
    notes: str | None
    exit_reason: str | None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None

    model_config = {"from_attributes": True}


class TradeEventRead(BaseModel):
    id: int
    trade_id: str
    event_type: str
    old_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CloseTradeRequest(BaseModel):
    exit_price: float = Field(gt=0, allow_inf_nan=False)
    reason: str | None = Field(default=None, max_length=500)


class TradingStats(BaseModel):
    total_pnl: float
    total_pnl_percent: float
    win_rate: float
    total_trades: int
    open_trades: int
    winning_trades: int
    losing_trades: int
    avg_win: float
    avg_loss: float
    max_drawdown: float
