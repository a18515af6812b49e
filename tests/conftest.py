"""Shared fixtures: in-memory database, a default account, trade helpers."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import papertrade.models  # noqa: F401
from papertrade.engine import ledger
from papertrade.models.trading_settings import TradingSettings
from papertrade.services.position_sizer import NormalizedSignal, SizingPolicy, size_position


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def account(session) -> TradingSettings:
    acct = TradingSettings(account_id="acct-1", webhook_secret="s3cret")
    session.add(acct)
    session.commit()
    session.refresh(acct)
    return acct


def open_trade(session, account, symbol="AAPL", action="buy", price=100.0,
               segment="equity", quantity=None, source="manual"):
    signal = NormalizedSignal(
        symbol=symbol, action=action, price=price,
        segment=segment, quantity=quantity, source=source,
    )
    position = size_position(signal, account, SizingPolicy())
    return ledger.open_trade(session, position)
