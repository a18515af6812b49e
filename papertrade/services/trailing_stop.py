"""Trailing-stop monitor — pure per-tick decision for an active trade.

Given a trade, a live price and the account's risk settings, decides whether the
trade is stopped out, hits its target, activates trailing, or advances its
trailing stop. No I/O, no database access; the trade ledger applies the result.

Evaluation order per tick:
    1. unrealized P&L at the tick price
    2. stop check (always wins over the target on the same tick)
    3. hard target check
    4. trailing activation (does not move the stop on the activating tick)
    5. trailing advance (the stop only ever moves toward profit)
"""

import math
from dataclasses import dataclass, field
from typing import Any

from papertrade.config import settings as app_settings
from papertrade.services.errors import InvalidPriceTick
from papertrade.utils.constants import Direction, EventType, TradeStatus

FILL_AT_ORDER = "order"
FILL_AT_TICK = "tick"


def compute_pnl(direction: str, entry_price: float, quantity: float, price: float) -> tuple[float, float]:
    """Return (pnl, pnl_percent) of a position valued at `price`."""
    if direction == Direction.LONG.value:
        diff = price - entry_price
    else:
        diff = entry_price - price
    return diff * quantity, diff / entry_price * 100


def validate_price(price: Any) -> float:
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidPriceTick(f"Price {price!r} is not a number")
    if not math.isfinite(value) or value <= 0:
        raise InvalidPriceTick(f"Price {price!r} must be positive and finite")
    return value


@dataclass(frozen=True)
class ExitPolicy:
    fill: str = FILL_AT_ORDER
    trailing_overrides_target: bool = False

    @classmethod
    def from_settings(cls) -> "ExitPolicy":
        return cls(
            fill=app_settings.exit_fill_policy,
            trailing_overrides_target=app_settings.trailing_overrides_target,
        )


@dataclass(frozen=True)
class MonitorEvent:
    event_type: str
    description: str
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None


@dataclass(frozen=True)
class TickDecision:
    price: float
    status: str
    current_sl_price: float
    trailing_activated: bool
    pnl: float
    pnl_percent: float
    exit_price: float | None = None
    exit_reason: str | None = None
    events: tuple[MonitorEvent, ...] = field(default_factory=tuple)

    @property
    def is_terminal(self) -> bool:
        return self.exit_price is not None


def _is_favorable(direction: str, candidate: float, current: float) -> bool:
    if direction == Direction.LONG.value:
        return candidate > current
    return candidate < current


def _trail_price(direction: str, price: float, distance_percent: float) -> float:
    if direction == Direction.LONG.value:
        return price * (1 - distance_percent / 100)
    return price * (1 + distance_percent / 100)


def _close(trade, price: float, status: str, exit_price: float, reason: str, sl: float) -> TickDecision:
    pnl, pnl_percent = compute_pnl(trade.direction, trade.entry_price, trade.quantity, exit_price)
    event = MonitorEvent(
        event_type=EventType.TRADE_CLOSED.value,
        description=(
            f"{reason}: {trade.direction.upper()} {trade.symbol} closed at {exit_price:.6g} "
            f"(tick {price:.6g}), P&L {pnl:.2f} ({pnl_percent:.2f}%)"
        ),
        old_value={"status": trade.status},
        new_value={
            "status": status,
            "exit_price": exit_price,
            "pnl": pnl,
            "pnl_percent": pnl_percent,
        },
    )
    return TickDecision(
        price=price,
        status=status,
        current_sl_price=sl,
        trailing_activated=trade.trailing_activated,
        pnl=pnl,
        pnl_percent=pnl_percent,
        exit_price=exit_price,
        exit_reason=reason,
        events=(event,),
    )


def evaluate_tick(trade, price: float, account, policy: ExitPolicy | None = None) -> TickDecision:
    """Decide the effect of one price tick on an active trade.

    Raises InvalidPriceTick for non-positive or non-finite prices; the caller
    must drop such ticks without touching the trade.
    """
    price = validate_price(price)
    policy = policy or ExitPolicy.from_settings()
    direction = trade.direction
    is_long = direction == Direction.LONG.value
    sl = trade.current_sl_price

    pnl, pnl_percent = compute_pnl(direction, trade.entry_price, trade.quantity, price)

    # Stop first: protects capital when stop and target both trigger
    stopped = price <= sl if is_long else price >= sl
    if stopped:
        exit_price = sl if policy.fill == FILL_AT_ORDER else price
        reason = "Trailing stop hit" if trade.trailing_activated else "Stop loss hit"
        return _close(trade, price, TradeStatus.CLOSED_SL.value, exit_price, reason, sl)

    target = trade.target_price
    if target is not None and not (policy.trailing_overrides_target and trade.trailing_activated):
        reached = price >= target if is_long else price <= target
        if reached:
            exit_price = target if policy.fill == FILL_AT_ORDER else price
            return _close(trade, price, TradeStatus.CLOSED_TARGET.value, exit_price, "Target reached", sl)

    events: list[MonitorEvent] = []
    status = trade.status
    activated = trade.trailing_activated

    if not activated and pnl_percent >= account.trailing_activation_percent:
        activated = True
        status = TradeStatus.TRAILING.value
        events.append(MonitorEvent(
            event_type=EventType.TRAILING_ACTIVATED.value,
            description=(
                f"Trailing activated for {trade.symbol} at {price:.6g} "
                f"(+{pnl_percent:.2f}% >= {account.trailing_activation_percent}%)"
            ),
            old_value={"status": trade.status, "trailing_activated": False},
            new_value={"status": status, "trailing_activated": True},
        ))
    elif activated:
        # Trail behind price by the account's original stop distance
        candidate = _trail_price(direction, price, account.stop_loss_percent)
        if _is_favorable(direction, candidate, sl):
            events.append(MonitorEvent(
                event_type=EventType.STOP_MOVED.value,
                description=f"Trailing stop for {trade.symbol} moved {sl:.6g} -> {candidate:.6g}",
                old_value={"current_sl_price": sl},
                new_value={"current_sl_price": candidate},
            ))
            sl = candidate

    return TickDecision(
        price=price,
        status=status,
        current_sl_price=sl,
        trailing_activated=activated,
        pnl=pnl,
        pnl_percent=pnl_percent,
        events=tuple(events),
    )
