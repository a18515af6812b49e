"""Pydantic schemas for inbound signals and price ticks."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class SignalPayload(BaseModel):
    """Buy/sell signal as posted by the dashboard or a TradingView alert."""

    symbol: str = Field(min_length=1, max_length=32)
    action: Literal["buy", "sell"]
    price: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    segment: Literal["equity", "forex"] = "equity"
    quantity: float | None = Field(default=None, allow_inf_nan=False)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("action", mode="before")
    @classmethod
    def _lower_action(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SignalResponse(BaseModel):
    success: bool = True
    trade_id: str
    message: str


class PriceTick(BaseModel):
    symbol: str = Field(min_length=1, max_length=32)
    price: float

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()
