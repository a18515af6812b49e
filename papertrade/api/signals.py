"""Signal API — manual dashboard signals and the TradingView webhook."""

import json
import logging

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from papertrade.database import get_session
from papertrade.engine.execution import signal_message, submit_signal
from papertrade.models.trading_settings import TradingSettings
from papertrade.schemas.signal import SignalPayload, SignalResponse
from papertrade.services.errors import InvalidSignal
from papertrade.services.price_feed import PriceSource
from papertrade.services.signal_gateway import authenticate_webhook, normalize_signal
from papertrade.api.deps import get_current_account, get_market_prices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["signals"])


@router.post("/signals", response_model=SignalResponse)
def manual_signal(
    body: SignalPayload,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
    prices: PriceSource = Depends(get_market_prices),
):
    signal = normalize_signal(body, source="manual", price_source=prices)
    trade = submit_signal(session, account, signal)
    return SignalResponse(trade_id=trade.id, message=signal_message(trade))


def _handle_webhook(session: Session, secret: str | None, raw: bytes, prices: PriceSource) -> SignalResponse:
    account = authenticate_webhook(session, secret)

    # TradingView posts alert bodies as text/plain, so parse the raw bytes
    try:
        payload = json.loads(raw) if raw else None
    except ValueError:
        raise InvalidSignal("Alert body is not valid JSON")
    logger.info(f"Webhook alert for account {account.account_id}: {payload}")

    signal = normalize_signal(payload, source="tradingview", price_source=prices)
    trade = submit_signal(session, account, signal)
    return SignalResponse(trade_id=trade.id, message=signal_message(trade))


@router.post("/webhook/tradingview", response_model=SignalResponse)
async def tradingview_webhook(
    request: Request,
    secret: str | None = None,
    session: Session = Depends(get_session),
    prices: PriceSource = Depends(get_market_prices),
):
    """Inbound TradingView alert, authenticated by the account's webhook secret.

    The secret is checked before the body is parsed.
    """
    raw = await request.body()
    return await run_in_threadpool(_handle_webhook, session, secret, raw, prices)
