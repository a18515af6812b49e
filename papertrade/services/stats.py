"""Trading statistics over an account's trades.

Pure computation over already-loaded rows, mirroring the dashboard summary.
"""

from papertrade.schemas.trade import TradingStats


def max_drawdown_pct(pnls: list[float], starting_equity: float) -> float:
    """Largest peak-to-trough fall of the realized equity curve, in percent."""
    equity = peak = starting_equity
    worst = 0.0
    for pnl in pnls:
        equity += pnl
        peak = max(peak, equity)
        if peak > 0:
            worst = max(worst, (peak - equity) / peak * 100)
    return worst


def compute_trading_stats(trades, initial_capital: float) -> TradingStats:
    closed = [t for t in trades if t.is_closed]
    open_count = sum(1 for t in trades if t.is_active)
    wins = [t.pnl for t in closed if (t.pnl or 0) > 0]
    losses = [t.pnl for t in closed if (t.pnl or 0) < 0]

    # Equity curve in close order
    ordered = sorted(closed, key=lambda t: t.closed_at or t.updated_at)
    realized = [t.pnl or 0.0 for t in ordered]

    return TradingStats(
        total_pnl=round(sum(realized), 2),
        total_pnl_percent=(
            round(sum(t.pnl_percent or 0.0 for t in closed) / len(closed), 2) if closed else 0.0
        ),
        win_rate=round(len(wins) / len(closed) * 100, 1) if closed else 0.0,
        total_trades=len(trades),
        open_trades=open_count,
        winning_trades=len(wins),
        losing_trades=len(losses),
        avg_win=round(sum(wins) / len(wins), 2) if wins else 0.0,
        avg_loss=round(abs(sum(losses) / len(losses)), 2) if losses else 0.0,
        max_drawdown=round(max_drawdown_pct(realized, initial_capital), 2),
    )
