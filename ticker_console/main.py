from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from ticker_console.api.routes import router
from ticker_console.config.settings import get_settings
from ticker_console.services.console import DeviceConsole


@asynccontextmanager
async def lifespan(app: FastAPI):
    console = app.state.console
    if console is None:
        console = DeviceConsole.from_settings(app.state.get_settings())
        app.state.console = console

    # first load and status poll are blocking device calls
    await run_in_threadpool(console.start)
    try:
        yield
    finally:
        await run_in_threadpool(console.stop)


app = FastAPI(title="Ticker Display Console", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

# NOTE: lazy-loaded so app import does not require env during tests.
app.state.get_settings = get_settings
app.state.console = None
