"""Shared constants for trade lifecycle and account defaults."""

from enum import Enum


class TradeStatus(str, Enum):
    OPEN = "open"
    TRAILING = "trailing"
    CLOSED_SL = "closed_sl"
    CLOSED_TARGET = "closed_target"
    CLOSED_MANUAL = "closed_manual"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class Segment(str, Enum):
    EQUITY = "equity"
    FOREX = "forex"


class EventType(str, Enum):
    TRADE_OPENED = "trade_opened"
    TRAILING_ACTIVATED = "trailing_activated"
    STOP_MOVED = "stop_moved"
    TRADE_CLOSED = "trade_closed"


ACTIVE_STATUSES = (TradeStatus.OPEN.value, TradeStatus.TRAILING.value)
CLOSED_STATUSES = (
    TradeStatus.CLOSED_SL.value,
    TradeStatus.CLOSED_TARGET.value,
    TradeStatus.CLOSED_MANUAL.value,
)


# Account defaults, matching the settings page of the dashboard
DEFAULT_INITIAL_CAPITAL = 100000.0
DEFAULT_STOP_LOSS_PCT = 1.5
DEFAULT_TRAILING_TARGET_PCT = 9.0
DEFAULT_TRAILING_ACTIVATION_PCT = 1.0
DEFAULT_POSITION_SIZE_PCT = 10.0
DEFAULT_MAX_TRADES_PER_DAY = 5
