"""TradeEvent model — append-only audit log of trade state changes."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class TradeEvent(SQLModel, table=True):
    __tablename__ = "trade_event"

    id: int | None = Field(default=None, primary_key=True)
    trade_id: str = Field(foreign_key="trade.id", index=True)
    event_type: str  # "trade_opened", "trailing_activated", "stop_moved", "trade_closed"
    old_value: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    new_value: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    description: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
