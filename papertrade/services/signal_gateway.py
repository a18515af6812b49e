"""Signal ingestion gateway — validates and normalizes inbound buy/sell signals.

A pure gate: it authenticates webhook callers, validates the payload and
resolves the entry price, but never creates anything itself.
"""

import logging
import secrets
from typing import Any

from pydantic import ValidationError
from sqlmodel import Session, select

from papertrade.models.trading_settings import TradingSettings
from papertrade.schemas.signal import SignalPayload
from papertrade.services.errors import InvalidSignal, Unauthorized
from papertrade.services.position_sizer import NormalizedSignal
from papertrade.services.price_feed import PriceSource

logger = logging.getLogger(__name__)


def authenticate_webhook(session: Session, secret: str | None) -> TradingSettings:
    """Return the account owning `secret`, or raise Unauthorized."""
    if not secret:
        logger.warning("Webhook call without secret rejected")
        raise Unauthorized("Missing webhook secret")

    account = session.exec(
        select(TradingSettings).where(TradingSettings.webhook_secret == secret)
    ).first()
    if account is None or not secrets.compare_digest(account.webhook_secret, secret):
        logger.warning("Webhook call with unknown secret rejected")
        raise Unauthorized("Invalid webhook secret")
    return account


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "payload"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def normalize_signal(
    payload: SignalPayload | dict[str, Any],
    source: str = "manual",
    price_source: PriceSource | None = None,
) -> NormalizedSignal:
    """Validate a signal and fill in defaults.

    The entry price falls back to the latest market price from `price_source`;
    if neither is available the signal is rejected. A missing quantity is left
    for the position sizer.
    """
    if not isinstance(payload, SignalPayload):
        if not isinstance(payload, dict):
            raise InvalidSignal("Signal payload must be a JSON object")
        try:
            payload = SignalPayload.model_validate(payload)
        except ValidationError as e:
            raise InvalidSignal(f"Invalid signal: {_describe_errors(e)}")

    price = payload.price
    if price is None and price_source is not None:
        price = price_source.latest(payload.symbol)
    if price is None:
        raise InvalidSignal(f"No price supplied and no market price known for {payload.symbol}")

    quantity = payload.quantity if payload.quantity is not None and payload.quantity > 0 else None

    return NormalizedSignal(
        symbol=payload.symbol,
        action=payload.action,
        price=float(price),
        segment=payload.segment,
        quantity=quantity,
        source=source,
        notes=payload.notes,
    )
