"""Trade model — one paper position from open to its terminal status."""

import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

from papertrade.utils.constants import ACTIVE_STATUSES, CLOSED_STATUSES, TradeStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    account_id: str = Field(index=True)

    symbol: str = Field(index=True)
    segment: str = "equity"  # "equity", "forex"
    direction: str  # "long", "short"
    quantity: float
    entry_price: float

    initial_sl_price: float  # fixed at open
    current_sl_price: float  # only moves in the trade's favor
    target_price: float | None = None

    status: str = Field(default=TradeStatus.OPEN.value, index=True)
    trailing_activated: bool = False

    current_price: float | None = None
    exit_price: float | None = None
    pnl: float | None = None
    pnl_percent: float | None = None

    signal_source: str = "manual"  # "manual", "tradingview", ...
    notes: str | None = None
    exit_reason: str | None = None

    created_at: datetime = Field(default_factory=_utcnow, index=True)
    updated_at: datetime = Field(default_factory=_utcnow)
    closed_at: datetime | None = None

    # Bumped on every ledger write; compare-and-set checks it with status
    version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES
