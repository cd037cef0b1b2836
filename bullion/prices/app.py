"""FastAPI application serving the price board to the dashboard."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from bullion.core.config import Settings
from bullion.prices.board import CrudeSource, MetalsSource, PriceBoard, refresh_board
from bullion.providers.eia import EIAClient
from bullion.providers.metals import MetalsClient

logger = structlog.get_logger(__name__)


async def _refresh_once(app: FastAPI) -> None:
    state = app.state
    state.board = await asyncio.to_thread(
        refresh_board,
        state.board,
        state.metals,
        state.crude,
        state.latest_path,
    )


async def _refresh_loop(app: FastAPI, interval_s: float) -> None:
    while True:
        await asyncio.sleep(interval_s)
        try:
            await _refresh_once(app)
        except Exception:
            # Keep serving the last board; the next tick retries.
            logger.exception("board_refresh_crashed")


def create_app(
    settings: Settings,
    *,
    metals: MetalsSource | None = None,
    crude: CrudeSource | None = None,
    refresh: bool = True,
) -> FastAPI:
    """Build the app.  With ``refresh=False`` the board stays warming up."""

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task: asyncio.Task | None = None
        if refresh:
            try:
                await _refresh_once(app)
            except Exception:
                # Start serving the warming-up board; the loop retries.
                logger.exception("board_initial_refresh_failed")
            task = asyncio.create_task(
                _refresh_loop(app, settings.server.refresh_ms / 1000)
            )
        logger.info(
            "price_board_started",
            refresh_ms=settings.server.refresh_ms,
            latest_path=str(settings.paths.latest_path),
        )
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    app = FastAPI(
        title="Bullion price board",
        description="Metal, crude and scored MCX gold prices for the dashboard.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.board = PriceBoard.warming_up(settings.server.refresh_ms)
    app.state.metals = metals or MetalsClient(settings.providers)
    app.state.crude = crude or EIAClient(settings.providers)
    app.state.latest_path = settings.paths.latest_path

    @app.get("/prices", tags=["Prices"])
    async def read_prices(request: Request) -> dict:
        board: PriceBoard = request.app.state.board
        return board.to_payload()

    return app
