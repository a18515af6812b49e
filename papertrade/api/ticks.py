"""Price tick ingest — the push side of the live price feed."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from papertrade.database import get_session
from papertrade.engine.execution import apply_tick
from papertrade.schemas.signal import PriceTick
from papertrade.services.price_feed import LatestPriceCache
from papertrade.api.deps import get_tick_cache, verify_feed_token

router = APIRouter(prefix="/api/ticks", tags=["ticks"], dependencies=[Depends(verify_feed_token)])


@router.post("")
def ingest_tick(
    tick: PriceTick,
    session: Session = Depends(get_session),
    cache: LatestPriceCache = Depends(get_tick_cache),
):
    """Record a price and apply it to every active trade on the symbol."""
    updated = apply_tick(session, tick.symbol, tick.price, cache=cache)
    return {
        "symbol": tick.symbol,
        "updated": len(updated),
        "closed": [t.id for t in updated if t.is_closed],
    }


@router.get("/latest")
def latest_prices(cache: LatestPriceCache = Depends(get_tick_cache)):
    return cache.snapshot()
