"""Signal execution and tick dispatch.

Signal path: gateway-normalized signal -> daily limit check -> position sizer
-> ledger.open_trade. Tick path: validate once -> cache -> ledger.update_live_price
for every active trade on the symbol.
"""

import logging
from datetime import datetime, time, timezone

from sqlmodel import Session, select, func

from papertrade.engine import ledger
from papertrade.models.trade import Trade
from papertrade.models.trading_settings import TradingSettings
from papertrade.services.errors import DailyTradeLimitReached, InvalidPriceTick
from papertrade.services.position_sizer import NormalizedSignal, SizingPolicy, size_position
from papertrade.services.price_feed import LatestPriceCache
from papertrade.services.trailing_stop import ExitPolicy, validate_price

logger = logging.getLogger(__name__)


def trades_opened_today(session: Session, account_id: str, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    day_start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    return session.exec(
        select(func.count())
        .select_from(Trade)
        .where(Trade.account_id == account_id, Trade.created_at >= day_start)
    ).one()


def submit_signal(
    session: Session,
    account: TradingSettings,
    signal: NormalizedSignal,
    policy: SizingPolicy | None = None,
) -> Trade:
    """Size and open a trade for a normalized signal."""
    opened = trades_opened_today(session, account.account_id)
    if account.max_trades_per_day and opened >= account.max_trades_per_day:
        raise DailyTradeLimitReached(
            f"Daily trade limit reached ({opened}/{account.max_trades_per_day})"
        )

    position = size_position(signal, account, policy)
    return ledger.open_trade(session, position)


def signal_message(trade: Trade) -> str:
    return f"Trade created: {trade.direction.upper()} {trade.symbol} at ${trade.entry_price:g}"


def apply_tick(
    session: Session,
    symbol: str,
    price: float,
    cache: LatestPriceCache | None = None,
    policy: ExitPolicy | None = None,
) -> list[Trade]:
    """Apply one price tick to every active trade on `symbol`.

    Invalid ticks are logged and dropped; no trade is touched.
    """
    try:
        price = validate_price(price)
    except InvalidPriceTick as e:
        logger.warning(f"Discarding tick for {symbol}: {e.message}")
        return []

    if cache is not None:
        cache.record(symbol, price)

    updated = []
    for trade in ledger.active_trades(session, symbol):
        updated.append(ledger.update_live_price(session, trade.id, price, policy))
    return updated
