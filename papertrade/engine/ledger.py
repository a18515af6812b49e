"""Trade ledger — the only writer of Trade and TradeEvent rows.

Owns trade creation, the status state machine and P&L bookkeeping:

    open -> trailing -> closed_sl | closed_target | closed_manual
    open -> closed_sl | closed_target | closed_manual

Mutations of one trade are serialized by a per-trade lock within the process.
Every write is also a compare-and-set on the (status, version) pair read when
the change was computed, so a writer in another process can never be
overwritten with stale state. A lost compare-and-set re-reads the row and
re-evaluates; a terminal transition therefore happens at most once. Trades
with different ids never contend.
"""

import logging
import threading
import weakref
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import update
from sqlmodel import Session, select

from papertrade.models.trade import Trade
from papertrade.models.trade_event import TradeEvent
from papertrade.models.trading_settings import TradingSettings
from papertrade.services.errors import (
    DuplicateOrInvalid,
    TradeAlreadyClosed,
    TradeNotFound,
    TradeWriteConflict,
)
from papertrade.services.position_sizer import SizedPosition
from papertrade.services.trailing_stop import (
    ExitPolicy,
    MonitorEvent,
    compute_pnl,
    evaluate_tick,
    validate_price,
)
from papertrade.utils.constants import EventType, TradeStatus

logger = logging.getLogger(__name__)

# Entries vanish once no caller holds the lock
_trade_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_trade_locks_guard = threading.Lock()

MAX_WRITE_ATTEMPTS = 5

_REQUIRED_FIELDS = (
    "account_id", "symbol", "segment", "direction", "quantity",
    "entry_price", "initial_sl_price", "current_sl_price",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_trade_lock(trade_id: str) -> threading.Lock:
    with _trade_locks_guard:
        lock = _trade_locks.get(trade_id)
        if lock is None:
            lock = threading.Lock()
            _trade_locks[trade_id] = lock
        return lock


def _load(session: Session, trade_id: str) -> Trade:
    trade = session.get(Trade, trade_id, populate_existing=True)
    if trade is None:
        raise TradeNotFound(f"Trade {trade_id} not found")
    return trade


def _add_event(
    session: Session,
    trade_id: str,
    event_type: str,
    description: str,
    old_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
):
    session.add(TradeEvent(
        trade_id=trade_id,
        event_type=event_type,
        old_value=old_value,
        new_value=new_value,
        description=description,
    ))


def _compare_and_set(
    session: Session,
    trade: Trade,
    changes: dict[str, Any],
) -> bool:
    """Apply `changes` only if the row still has the status and version of `trade`."""
    result = session.connection().execute(
        update(Trade)
        .where(
            Trade.id == trade.id,
            Trade.status == trade.status,
            Trade.version == trade.version,
        )
        .values(version=trade.version + 1, **changes)
    )
    return result.rowcount == 1


def get_trade(session: Session, trade_id: str) -> Trade:
    return _load(session, trade_id)


def open_trade(session: Session, position: SizedPosition) -> Trade:
    """Persist a sized position as an `open` trade and log `trade_opened`."""
    missing = [f for f in _REQUIRED_FIELDS if getattr(position, f, None) in (None, "")]
    if missing:
        raise DuplicateOrInvalid(f"Cannot open trade, missing: {', '.join(missing)}")
    if position.quantity <= 0 or position.entry_price <= 0:
        raise DuplicateOrInvalid("Quantity and entry price must be positive")

    now = _utcnow()
    trade = Trade(
        account_id=position.account_id,
        symbol=position.symbol,
        segment=position.segment,
        direction=position.direction,
        quantity=position.quantity,
        entry_price=position.entry_price,
        current_price=position.entry_price,
        initial_sl_price=position.initial_sl_price,
        current_sl_price=position.current_sl_price,
        target_price=position.target_price,
        status=TradeStatus.OPEN.value,
        signal_source=position.signal_source,
        notes=position.notes,
        created_at=now,
        updated_at=now,
    )
    session.add(trade)
    session.flush()

    via = "TradingView webhook" if position.signal_source == "tradingview" else position.signal_source
    _add_event(
        session, trade.id, EventType.TRADE_OPENED.value,
        f"Trade opened via {via}: {position.direction.upper()} {position.symbol} "
        f"at ${position.entry_price}",
        new_value={
            "symbol": position.symbol,
            "direction": position.direction,
            "quantity": position.quantity,
            "entry_price": position.entry_price,
            "stop_loss": position.initial_sl_price,
            "target": position.target_price,
        },
    )
    session.commit()
    session.refresh(trade)

    logger.info(
        f"[{trade.id}] Opened {trade.direction} {trade.quantity:g} {trade.symbol} "
        f"@ {trade.entry_price} sl={trade.initial_sl_price:.6g} target={trade.target_price}"
    )
    return trade


def _account_for(session: Session, account_id: str) -> TradingSettings:
    account = session.exec(
        select(TradingSettings).where(TradingSettings.account_id == account_id)
    ).first()
    # Trades outlive settings edits; fall back to defaults if the row is gone
    return account or TradingSettings(account_id=account_id)


def _write_events(session: Session, trade_id: str, events: tuple[MonitorEvent, ...]):
    for ev in events:
        _add_event(session, trade_id, ev.event_type, ev.description, ev.old_value, ev.new_value)


def update_live_price(
    session: Session,
    trade_id: str,
    price: float,
    policy: ExitPolicy | None = None,
) -> Trade:
    """Apply a live price tick to a trade.

    Recomputes unrealized P&L and applies whatever the trailing-stop monitor
    decides. Terminal trades are returned unchanged. Raises InvalidPriceTick
    before touching anything if the price is unusable.
    """
    price = validate_price(price)

    with _get_trade_lock(trade_id):
        for _ in range(MAX_WRITE_ATTEMPTS):
            trade = _load(session, trade_id)
            if trade.is_closed:
                return trade

            account = _account_for(session, trade.account_id)
            decision = evaluate_tick(trade, price, account, policy)

            now = _utcnow()
            changes: dict[str, Any] = {
                "current_price": decision.price,
                "pnl": decision.pnl,
                "pnl_percent": decision.pnl_percent,
                "status": decision.status,
                "current_sl_price": decision.current_sl_price,
                "trailing_activated": decision.trailing_activated,
                "updated_at": now,
            }
            if decision.is_terminal:
                changes.update(exit_price=decision.exit_price, exit_reason=decision.exit_reason, closed_at=now)

            previous_status = trade.status
            if _compare_and_set(session, trade, changes):
                break

            # Another process wrote first; re-evaluate against its state
            session.rollback()
            logger.info(f"[{trade_id}] Tick at {price} lost a write race, re-evaluating")
        else:
            logger.warning(f"[{trade_id}] Tick at {price} dropped after {MAX_WRITE_ATTEMPTS} write conflicts")
            return _load(session, trade_id)

        _write_events(session, trade_id, decision.events)
        session.commit()
        trade = _load(session, trade_id)

    if decision.status != previous_status:
        logger.info(
            f"[{trade_id}] {trade.symbol} {previous_status} -> {decision.status} "
            f"at tick {price} (pnl={trade.pnl:.2f})"
        )
    return trade


def close_manual(session: Session, trade_id: str, exit_price: float, reason: str | None = None) -> Trade:
    """Close an active trade at `exit_price` and fix its realized P&L."""
    exit_price = validate_price(exit_price)
    reason = reason or "Manual close"

    with _get_trade_lock(trade_id):
        for _ in range(MAX_WRITE_ATTEMPTS):
            trade = _load(session, trade_id)
            if trade.is_closed:
                raise TradeAlreadyClosed(f"Trade {trade_id} is already {trade.status}")

            pnl, pnl_percent = compute_pnl(trade.direction, trade.entry_price, trade.quantity, exit_price)
            now = _utcnow()
            previous_status = trade.status

            if _compare_and_set(session, trade, {
                "status": TradeStatus.CLOSED_MANUAL.value,
                "exit_price": exit_price,
                "current_price": exit_price,
                "exit_reason": reason,
                "pnl": pnl,
                "pnl_percent": pnl_percent,
                "closed_at": now,
                "updated_at": now,
            }):
                break

            # Row moved on (e.g. trailing activated elsewhere); closed rows raise above
            session.rollback()
            logger.info(f"[{trade_id}] Close lost a write race, retrying")
        else:
            raise TradeWriteConflict(f"Trade {trade_id} kept changing, retry the close")

        _add_event(
            session, trade_id, EventType.TRADE_CLOSED.value,
            f"{reason}: {trade.direction.upper()} {trade.symbol} closed at {exit_price}, "
            f"P&L {pnl:.2f} ({pnl_percent:.2f}%)",
            old_value={"status": previous_status},
            new_value={
                "status": TradeStatus.CLOSED_MANUAL.value,
                "exit_price": exit_price,
                "pnl": pnl,
                "pnl_percent": pnl_percent,
            },
        )
        session.commit()
        trade = _load(session, trade_id)

    logger.info(f"[{trade_id}] Closed manually at {exit_price} (pnl={pnl:.2f})")
    return trade


def active_trades(session: Session, symbol: str | None = None) -> list[Trade]:
    stmt = select(Trade).where(Trade.status.in_((TradeStatus.OPEN.value, TradeStatus.TRAILING.value)))
    if symbol is not None:
        stmt = stmt.where(Trade.symbol == symbol.upper())
    return list(session.exec(stmt).all())
