"""SOLSIM FastAPI application — composition root for the simulator."""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from src.analytics.session_store import SessionStore
from src.core.logging import get_logger
from src.simulator.scheduler import AsyncioScheduler
from src.simulator.session_recorder import SessionRecorder
from src.simulator.trading_engine import TradingSimulator

log = get_logger(__name__)

DEFAULT_USER_ID = 1


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup/shutdown lifecycle — stop the bot on exit."""
    log.info("api_starting")
    yield
    app.state.simulator.stop()
    app.state.recorder.detach()
    log.info("api_shutdown")


def create_app(
    simulator: TradingSimulator | None = None,
    session_store: SessionStore | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        simulator: Simulator to expose. A live one on the running asyncio
            loop is created when omitted.
        session_store: Where sessions and trades are recorded. Defaults to
            a store journaling into ``settings.journal_dir`` (if set).
    """
    settings = get_settings()

    app = FastAPI(
        title="SOLSIM API",
        description="Simulated Solana auto-trading bot — control surface",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.simulator = simulator or TradingSimulator(AsyncioScheduler(), settings=settings)
    app.state.session_store = session_store or SessionStore(journal_dir=settings.journal_dir)
    app.state.recorder = SessionRecorder(app.state.session_store, user_id=DEFAULT_USER_ID)
    app.state.recorder.attach(app.state.simulator)

    # Register routers
    from src.api.routes.health import router as health_router
    from src.api.routes.simulator import router as simulator_router

    app.include_router(health_router, prefix="/api")
    app.include_router(simulator_router, prefix="/api")

    return app


app = create_app()
