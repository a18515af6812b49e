"""Dashboard API — account-level trading statistics."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from papertrade.database import get_session
from papertrade.models.trade import Trade
from papertrade.models.trading_settings import TradingSettings
from papertrade.schemas.trade import TradingStats
from papertrade.services.stats import compute_trading_stats
from papertrade.api.deps import get_current_account

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=TradingStats)
def dashboard_summary(
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Aggregated stats across the account's trades."""
    trades = session.exec(select(Trade).where(Trade.account_id == account.account_id)).all()
    return compute_trading_stats(trades, account.initial_capital)
