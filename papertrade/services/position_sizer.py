"""Position sizing — turns a normalized signal plus account settings into a position.

Pure computation, no I/O. The trade ledger persists the result.
"""

import math
from dataclasses import dataclass

from papertrade.config import settings as app_settings
from papertrade.services.errors import InvalidSizing
from papertrade.utils.constants import Direction, Segment


@dataclass(frozen=True)
class NormalizedSignal:
    """A validated signal as produced by the signal gateway."""

    symbol: str
    action: str  # "buy", "sell"
    price: float
    segment: str = Segment.EQUITY.value
    quantity: float | None = None
    source: str = "manual"
    notes: str | None = None

    @property
    def direction(self) -> str:
        return Direction.LONG.value if self.action == "buy" else Direction.SHORT.value


@dataclass(frozen=True)
class SizedPosition:
    account_id: str
    symbol: str
    segment: str
    direction: str
    quantity: float
    entry_price: float
    initial_sl_price: float
    current_sl_price: float
    target_price: float | None
    signal_source: str = "manual"
    notes: str | None = None


@dataclass(frozen=True)
class SizingPolicy:
    """Quantity step per segment; a step of 0 keeps the quantity fractional."""

    equity_quantity_step: float = 1.0
    forex_quantity_step: float = 0.0

    @classmethod
    def from_settings(cls) -> "SizingPolicy":
        return cls(
            equity_quantity_step=app_settings.equity_quantity_step,
            forex_quantity_step=app_settings.forex_quantity_step,
        )

    def step_for(self, segment: str) -> float:
        if segment == Segment.FOREX.value:
            return self.forex_quantity_step
        return self.equity_quantity_step


def floor_to_step(quantity: float, step: float) -> float:
    if step <= 0:
        return quantity
    # Small epsilon so 0.3 / 0.1 does not floor to 2
    units = math.floor(quantity / step + 1e-9)
    return round(units * step, 10)


def stop_price(direction: str, entry_price: float, stop_loss_percent: float) -> float:
    if direction == Direction.LONG.value:
        return entry_price * (1 - stop_loss_percent / 100)
    return entry_price * (1 + stop_loss_percent / 100)


def target_price(direction: str, entry_price: float, target_percent: float) -> float | None:
    if not target_percent:
        return None
    if direction == Direction.LONG.value:
        return entry_price * (1 + target_percent / 100)
    return entry_price * (1 - target_percent / 100)


def size_position(
    signal: NormalizedSignal,
    account,
    policy: SizingPolicy | None = None,
) -> SizedPosition:
    """Compute quantity, stop-loss and target for a signal.

    `account` is any object with the TradingSettings risk fields. An explicit
    positive quantity on the signal is used verbatim; otherwise the quantity is
    `current_balance * default_position_size_percent / 100 / entry_price`,
    floored to the segment's quantity step.
    """
    policy = policy or SizingPolicy.from_settings()
    entry = signal.price
    if entry is None or not math.isfinite(entry) or entry <= 0:
        raise InvalidSizing(f"Entry price must be positive, got {entry}")

    direction = signal.direction
    if signal.quantity is not None and signal.quantity > 0:
        quantity = float(signal.quantity)
    else:
        position_value = account.current_balance * account.default_position_size_percent / 100
        quantity = floor_to_step(position_value / entry, policy.step_for(signal.segment))

    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidSizing(
            f"Computed quantity {quantity} for {signal.symbol} at {entry} is not positive"
        )

    sl = stop_price(direction, entry, account.stop_loss_percent)
    target = target_price(direction, entry, account.trailing_target_percent)

    if direction == Direction.LONG.value:
        consistent = sl < entry and (target is None or target > entry)
    else:
        consistent = sl > entry and (target is None or 0 < target < entry)
    if not consistent or sl <= 0:
        raise InvalidSizing(
            f"Inconsistent levels for {direction} {signal.symbol}: "
            f"entry={entry} stop={sl} target={target}"
        )

    return SizedPosition(
        account_id=account.account_id,
        symbol=signal.symbol,
        segment=signal.segment,
        direction=direction,
        quantity=quantity,
        entry_price=entry,
        initial_sl_price=sl,
        current_sl_price=sl,
        target_price=target,
        signal_source=signal.source,
        notes=signal.notes,
    )
