"""Price supply for the engine.

The engine never generates prices; it consumes them from a `PriceSource`.
The default source is an in-memory cache of the latest tick per symbol, fed by
the tick ingest endpoint. Production feeds can be swapped in with
`set_price_source()`.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Protocol

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    def latest(self, symbol: str) -> float | None:
        ...


class LatestPriceCache:
    """Thread-safe map of symbol -> (price, received_at)."""

    def __init__(self):
        self._prices: dict[str, tuple[float, datetime]] = {}
        self._lock = threading.Lock()

    def record(self, symbol: str, price: float):
        with self._lock:
            self._prices[symbol.upper()] = (price, datetime.now(timezone.utc))

    def latest(self, symbol: str) -> float | None:
        with self._lock:
            entry = self._prices.get(symbol.upper())
        return entry[0] if entry else None

    def snapshot(self) -> dict[str, dict]:
        with self._lock:
            items = list(self._prices.items())
        return {
            symbol: {"price": price, "received_at": received_at.isoformat()}
            for symbol, (price, received_at) in items
        }

    def clear(self):
        with self._lock:
            self._prices.clear()


price_cache = LatestPriceCache()
_price_source: PriceSource = price_cache


def get_price_source() -> PriceSource:
    return _price_source


def set_price_source(source: PriceSource):
    global _price_source
    _price_source = source
    logger.info(f"Price source set to {type(source).__name__}")
