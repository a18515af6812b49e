"""Trade API — read models and the manual close command."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from papertrade.database import get_session
from papertrade.engine import ledger
from papertrade.models.trade import Trade
from papertrade.models.trade_event import TradeEvent
from papertrade.models.trading_settings import TradingSettings
from papertrade.schemas.trade import CloseTradeRequest, TradeEventRead, TradeRead
from papertrade.utils.constants import ACTIVE_STATUSES, CLOSED_STATUSES
from papertrade.api.deps import get_current_account

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _owned_trade(session: Session, trade_id: str, account: TradingSettings) -> Trade:
    trade = session.get(Trade, trade_id)
    if not trade or trade.account_id != account.account_id:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@router.get("", response_model=list[TradeRead])
def list_trades(
    group: str | None = None,  # "active", "closed"
    segment: str | None = None,
    limit: int = 100,
    offset: int = 0,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    stmt = select(Trade).where(Trade.account_id == account.account_id)
    if group == "active":
        stmt = stmt.where(Trade.status.in_(ACTIVE_STATUSES)).order_by(Trade.created_at.desc())
    elif group == "closed":
        stmt = stmt.where(Trade.status.in_(CLOSED_STATUSES)).order_by(Trade.closed_at.desc())
    elif group is not None:
        raise HTTPException(status_code=422, detail="group must be 'active' or 'closed'")
    else:
        stmt = stmt.order_by(Trade.created_at.desc())
    if segment is not None:
        stmt = stmt.where(Trade.segment == segment)
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: str,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return _owned_trade(session, trade_id, account)


@router.get("/{trade_id}/events", response_model=list[TradeEventRead])
def trade_events(
    trade_id: str,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    _owned_trade(session, trade_id, account)
    return session.exec(
        select(TradeEvent).where(TradeEvent.trade_id == trade_id).order_by(TradeEvent.id)
    ).all()


@router.post("/{trade_id}/close", response_model=TradeRead)
def close_trade(
    trade_id: str,
    body: CloseTradeRequest,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Manually close an active trade at the given exit price."""
    _owned_trade(session, trade_id, account)
    return ledger.close_manual(session, trade_id, body.exit_price, body.reason)
