"""Database models."""

from papertrade.models.trade import Trade
from papertrade.models.trade_event import TradeEvent
from papertrade.models.trading_settings import TradingSettings

__all__ = [
    "Trade",
    "TradeEvent",
    "TradingSettings",
]
