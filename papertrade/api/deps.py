"""Shared API dependencies."""

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select

from papertrade.config import settings
from papertrade.database import get_session
from papertrade.models.trading_settings import TradingSettings
from papertrade.services.auth import decode_access_token
from papertrade.services.price_feed import LatestPriceCache, PriceSource, get_price_source, price_cache

bearer_scheme = HTTPBearer()


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> TradingSettings:
    """Validate JWT and return the caller's account settings."""
    account_id = decode_access_token(credentials.credentials)
    if account_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    account = session.exec(
        select(TradingSettings).where(TradingSettings.account_id == account_id)
    ).first()
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
        )
    return account


def get_market_prices() -> PriceSource:
    return get_price_source()


def get_tick_cache() -> LatestPriceCache:
    return price_cache


def verify_feed_token(x_feed_token: str | None = Header(default=None)):
    if settings.feed_token and x_feed_token != settings.feed_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid feed token",
        )
