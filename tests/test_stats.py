"""Tests for dashboard statistics."""

from datetime import datetime, timedelta, timezone

import pytest

from papertrade.models.trade import Trade
from papertrade.services.stats import compute_trading_stats, max_drawdown_pct

T0 = datetime(2025, 3, 3, 14, 30, tzinfo=timezone.utc)


def _trade(status: str, pnl: float | None, pnl_percent: float | None = None, minutes: int = 0) -> Trade:
    closed_at = T0 + timedelta(minutes=minutes) if status.startswith("closed") else None
    return Trade(
        account_id="acct-1", symbol="AAPL", segment="equity", direction="long",
        quantity=10, entry_price=100.0, initial_sl_price=98.5, current_sl_price=98.5,
        status=status, pnl=pnl, pnl_percent=pnl_percent, closed_at=closed_at,
    )


class TestMaxDrawdown:
    def test_no_trades(self):
        assert max_drawdown_pct([], 1000.0) == 0.0

    def test_only_gains(self):
        assert max_drawdown_pct([10.0, 20.0], 1000.0) == 0.0

    def test_peak_to_trough(self):
        # 1000 -> 1100 -> 990 -> 1045
        assert max_drawdown_pct([100.0, -110.0, 55.0], 1000.0) == pytest.approx(10.0)


class TestTradingStats:
    def test_empty(self):
        stats = compute_trading_stats([], 100000.0)
        assert stats.total_trades == 0
        assert stats.win_rate == 0.0
        assert stats.avg_win == 0.0

    def test_mixed_trades(self):
        trades = [
            _trade("closed_target", 100.0, 10.0, minutes=1),
            _trade("closed_sl", -50.0, -5.0, minutes=2),
            _trade("closed_manual", 30.0, 3.0, minutes=3),
            _trade("trailing", 12.0, 1.2),
            _trade("open", None),
        ]
        stats = compute_trading_stats(trades, 1000.0)

        assert stats.total_trades == 5
        assert stats.open_trades == 2
        assert stats.winning_trades == 2
        assert stats.losing_trades == 1
        assert stats.total_pnl == 80.0
        assert stats.total_pnl_percent == 2.67
        assert stats.win_rate == 66.7
        assert stats.avg_win == 65.0
        assert stats.avg_loss == 50.0
        # 1000 -> 1100 -> 1050
        assert stats.max_drawdown == pytest.approx(4.55)

    def test_unrealized_pnl_is_excluded(self):
        stats = compute_trading_stats([_trade("trailing", 500.0, 5.0)], 1000.0)
        assert stats.total_pnl == 0.0
        assert stats.max_drawdown == 0.0
