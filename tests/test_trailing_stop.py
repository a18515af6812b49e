"""Tests for the trailing-stop monitor decision function."""

import math
from types import SimpleNamespace

import pytest

from papertrade.services.errors import InvalidPriceTick
from papertrade.services.trailing_stop import ExitPolicy, compute_pnl, evaluate_tick

ACCOUNT = SimpleNamespace(stop_loss_percent=1.5, trailing_activation_percent=1.0)
ORDER_FILL = ExitPolicy(fill="order")


def _long(**overrides):
    values = dict(
        symbol="AAPL", direction="long", status="open", entry_price=100.0,
        quantity=100.0, current_sl_price=98.5, target_price=109.0,
        trailing_activated=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _short(**overrides):
    values = dict(
        symbol="EURUSD", direction="short", status="open", entry_price=1.10,
        quantity=1000.0, current_sl_price=1.1055, target_price=1.001,
        trailing_activated=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _apply(trade, decision):
    """Carry a decision's state forward onto a test trade."""
    trade.status = decision.status
    trade.current_sl_price = decision.current_sl_price
    trade.trailing_activated = decision.trailing_activated
    return trade


# ---------------------------------------------------------------------------
# 1. P&L
# ---------------------------------------------------------------------------

class TestComputePnl:
    def test_long_profit(self):
        assert compute_pnl("long", 100.0, 10.0, 105.0) == (50.0, 5.0)

    def test_short_profit_when_price_falls(self):
        pnl, pct = compute_pnl("short", 100.0, 10.0, 95.0)
        assert pnl == 50.0
        assert pct == 5.0

    def test_pure(self):
        assert compute_pnl("long", 100.0, 3.0, 97.0) == compute_pnl("long", 100.0, 3.0, 97.0)


# ---------------------------------------------------------------------------
# 2. Stop / target
# ---------------------------------------------------------------------------

class TestExits:
    def test_long_stop_fills_at_stop_price(self):
        decision = evaluate_tick(_long(), 98.4, ACCOUNT, ORDER_FILL)
        assert decision.status == "closed_sl"
        assert decision.exit_price == 98.5
        assert decision.pnl == pytest.approx((98.5 - 100.0) * 100)
        assert [e.event_type for e in decision.events] == ["trade_closed"]

    def test_tick_fill_policy_uses_tick_price(self):
        decision = evaluate_tick(_long(), 98.4, ACCOUNT, ExitPolicy(fill="tick"))
        assert decision.exit_price == 98.4

    def test_short_stop(self):
        decision = evaluate_tick(_short(), 1.106, SimpleNamespace(
            stop_loss_percent=0.5, trailing_activation_percent=1.0), ORDER_FILL)
        assert decision.status == "closed_sl"
        assert decision.exit_price == pytest.approx(1.1055)
        assert decision.pnl < 0

    def test_long_target(self):
        decision = evaluate_tick(_long(), 110.0, ACCOUNT, ORDER_FILL)
        assert decision.status == "closed_target"
        assert decision.exit_price == 109.0
        assert decision.pnl == pytest.approx(900.0)

    def test_short_target(self):
        decision = evaluate_tick(_short(), 1.0, ACCOUNT, ORDER_FILL)
        assert decision.status == "closed_target"
        assert decision.pnl > 0

    def test_stop_takes_precedence_over_target(self):
        trade = _long(current_sl_price=106.0, target_price=105.0, trailing_activated=True, status="trailing")
        decision = evaluate_tick(trade, 105.5, ACCOUNT, ORDER_FILL)
        assert decision.status == "closed_sl"
        assert decision.exit_reason == "Trailing stop hit"

    def test_trailing_can_override_target(self):
        trade = _long(trailing_activated=True, status="trailing", current_sl_price=100.0)
        policy = ExitPolicy(fill="order", trailing_overrides_target=True)
        decision = evaluate_tick(trade, 112.0, ACCOUNT, policy)
        assert decision.status == "trailing"
        assert decision.current_sl_price == pytest.approx(112.0 * 0.985)


# ---------------------------------------------------------------------------
# 3. Trailing
# ---------------------------------------------------------------------------

class TestTrailing:
    def test_activation_does_not_move_stop(self):
        decision = evaluate_tick(_long(), 101.5, ACCOUNT, ORDER_FILL)
        assert decision.status == "trailing"
        assert decision.trailing_activated is True
        assert decision.current_sl_price == 98.5
        assert [e.event_type for e in decision.events] == ["trailing_activated"]

    def test_below_activation_only_updates_pnl(self):
        decision = evaluate_tick(_long(), 100.5, ACCOUNT, ORDER_FILL)
        assert decision.status == "open"
        assert decision.events == ()
        assert decision.pnl == pytest.approx(50.0)
        assert not decision.is_terminal

    def test_long_stop_is_monotonic(self):
        trade = _long()
        stops = []
        for price in [101.5, 105.0, 104.0, 106.0, 104.5, 105.0]:
            decision = evaluate_tick(trade, price, ACCOUNT, ORDER_FILL)
            assert not decision.is_terminal
            _apply(trade, decision)
            stops.append(trade.current_sl_price)
        assert stops == sorted(stops)
        assert stops[-1] == pytest.approx(106.0 * 0.985)

    def test_short_stop_is_monotonic(self):
        trade = _short(current_sl_price=1.1055)
        account = SimpleNamespace(stop_loss_percent=0.5, trailing_activation_percent=1.0)
        stops = []
        for price in [1.085, 1.08, 1.083, 1.075, 1.079]:
            decision = evaluate_tick(trade, price, account, ORDER_FILL)
            _apply(trade, decision)
            stops.append(trade.current_sl_price)
        assert stops == sorted(stops, reverse=True)

    def test_trailed_stop_locks_in_profit(self):
        trade = _long()
        for price in [101.5, 105.0]:
            _apply(trade, evaluate_tick(trade, price, ACCOUNT, ORDER_FILL))
        decision = evaluate_tick(trade, 103.0, ACCOUNT, ORDER_FILL)
        assert decision.status == "closed_sl"
        assert decision.exit_price == pytest.approx(105.0 * 0.985)
        assert decision.pnl > 0


# ---------------------------------------------------------------------------
# 4. Invalid ticks
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("price", [0, -1.0, math.nan, math.inf, "abc", None])
def test_invalid_price_tick_raises(price):
    with pytest.raises(InvalidPriceTick):
        evaluate_tick(_long(), price, ACCOUNT, ORDER_FILL)
