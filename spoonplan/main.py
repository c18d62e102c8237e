"""
Spoonplan - Main Application
Energy-budgeted daily slot ledger + auto-fill + load shedding + week/month plan negotiation.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spoonplan.config import settings
from spoonplan.db import create_db_and_tables, verify_database_connection
from spoonplan.api import days, goals, plan
from spoonplan.services.plan_negotiator import PlanNegotiator

logger = logging.getLogger("spoonplan")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)

    db_status = await verify_database_connection()
    logger.info("database_status", extra=db_status)

    await create_db_and_tables()

    # single-user: one negotiator for the process lifetime
    app.state.negotiator = PlanNegotiator()
    logger.info("spoonplan_online", extra={"env": settings.env})

    yield

    # unapplied drafts are never persisted
    app.state.negotiator.cancel()
    logger.info("spoonplan_offline")


app = FastAPI(
    title="Spoonplan",
    description="""
    Spoon-budgeted daily scheduling: slot ledger, rituals, auto-fill,
    load shedding, storm warnings and week/month plan negotiation.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {
        "name": "Spoonplan",
        "version": app.version,
        "slot_window": [f"{settings.day_start_hour:02d}:00", f"{settings.day_end_hour:02d}:00"],
        "advisory_enabled": bool(settings.openai_api_key),
    }


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(goals.router, prefix="/api")
app.include_router(days.router, prefix="/api")
app.include_router(plan.router, prefix="/api")
