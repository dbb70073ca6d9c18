"""FastAPI application factory for the Data Chatter gateway.

Initializes settings, the pooled database, the tool engine and the LLM
client on startup via the lifespan context manager, stored on app.state
so routers can access them without globals. The database pool is
disposed on shutdown.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.agent.engine import ToolEngine
from app.config import Settings
from app.db.connection import create_database
from app.llm.client import LLMClient
from app.llm.provider import create_provider
from app.middleware.rate_limit import RateLimitMiddleware
from app.routers import database, health, llm, tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize shared resources on startup, release them on shutdown."""
    settings = Settings()
    db = create_database(settings)
    engine = ToolEngine(db, policy_mode=settings.sql_policy_mode)
    provider = create_provider(settings)
    llm_client = LLMClient(
        provider,
        db,
        engine,
        schema_tables=settings.get_schema_tables(),
        schema_hint=settings.schema_hint,
    )

    app.state.settings = settings
    app.state.database = db
    app.state.engine = engine
    app.state.provider = provider
    app.state.llm_client = llm_client

    if not provider.is_configured():
        logger.warning(provider.missing_credential_hint())

    logger.info(
        "Data Chatter ready (database=%s, model=%s, sql_policy=%s)",
        db.display_name,
        provider.get_model_name(),
        settings.sql_policy_mode,
    )
    try:
        yield
    finally:
        db.close()
        logger.info("Database pool closed")


def create_app() -> FastAPI:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="Data Chatter",
        description="Natural-language and direct SQL access to a read-only database",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        RateLimitMiddleware,
        limits={"/llm/message": settings.rate_limit_llm_per_min},
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(health.router)
    app.include_router(database.router)
    app.include_router(tools.router)
    app.include_router(llm.router)
    return app
