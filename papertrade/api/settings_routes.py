"""Account settings API — risk parameters and the webhook URL."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlmodel import Session

from papertrade.database import get_session
from papertrade.models.trading_settings import TradingSettings
from papertrade.schemas.trading_settings import (
    TradingSettingsCreate,
    TradingSettingsRead,
    TradingSettingsUpdate,
)
from papertrade.services.auth import generate_webhook_secret, webhook_url
from papertrade.api.deps import get_current_account

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=TradingSettingsRead)
def read_settings(account: TradingSettings = Depends(get_current_account)):
    return account


@router.put("", response_model=TradingSettingsRead)
def update_settings(
    data: TradingSettingsUpdate,
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    update_data = data.model_dump(exclude_unset=True)

    # Validate full merged config so partial updates cannot bypass cross-field rules.
    merged = {**account.model_dump(include=set(TradingSettingsCreate.model_fields)), **update_data}
    try:
        TradingSettingsCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False, include_input=False))

    for key, value in update_data.items():
        setattr(account, key, value)
    account.updated_at = datetime.now(timezone.utc)

    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@router.get("/webhook-url")
def get_webhook_url(
    account: TradingSettings = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Return the TradingView webhook URL, creating a secret if none exists yet."""
    if not account.webhook_secret:
        account.webhook_secret = generate_webhook_secret()
        account.updated_at = datetime.now(timezone.utc)
        session.add(account)
        session.commit()
        session.refresh(account)
    return {"webhook_url": webhook_url(account.webhook_secret)}
