"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from papertrade.config import settings
from papertrade.database import create_db_and_tables
from papertrade.services.errors import TradingError
from papertrade.utils.logging import setup_logging
from papertrade.api import dashboard, settings_routes, signals, system, ticks, trades


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    from papertrade.engine.scheduler import start_scheduler, stop_scheduler
    start_scheduler()

    yield

    stop_scheduler()


app = FastAPI(
    title="Paper Trading Service",
    description="Paper-trading engine: signal sizing, trailing stops and trade ledger",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TradingError)
async def trading_error_handler(request: Request, exc: TradingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Mount routers
app.include_router(signals.router)
app.include_router(trades.router)
app.include_router(settings_routes.router)
app.include_router(ticks.router)
app.include_router(dashboard.router)
app.include_router(system.router)
