"""
Sandbox FastAPI application.

This module creates and configures the sandbox app:
  1. Lifespan manager: creates tables on startup, disposes the engine on shutdown
  2. Exception handlers: map sandbox errors to the error envelope
  3. Router registration

Running locally:
    uvicorn carbon_calculator.sandbox.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from carbon_calculator.config import settings
from carbon_calculator.logging_config import configure_logging
from carbon_calculator.sandbox import models  # noqa: F401  (registers tables on Base.metadata)
from carbon_calculator.sandbox.database import engine, Base
from carbon_calculator.sandbox.exceptions import register_exception_handlers
from carbon_calculator.sandbox.routers import footprints, payment_cards, sandbox

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Sandbox ready on %s", settings.SANDBOX_DATABASE_URL)
    yield
    await engine.dispose()


app = FastAPI(
    title=f"{settings.APP_NAME} Sandbox",
    version=settings.APP_VERSION,
    description="Local emulation of the Carbon Calculator payment card and footprint API",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(payment_cards.router, tags=["Payment Cards"])
app.include_router(footprints.router, tags=["Footprints"])
app.include_router(sandbox.router, prefix="/sandbox", tags=["Sandbox"])


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok", "version": settings.APP_VERSION}
