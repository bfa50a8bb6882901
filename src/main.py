"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.routes import router
from src.audit.engine import AuditEngine
from src.config import get_settings
from src.logging_config import setup_logging
from src.store.redis import AuditStore, create_redis_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting site audit service")

    redis_client = await create_redis_client(settings.redis_url)
    store = AuditStore(redis_client, default_ttl=settings.audit_ttl_seconds)
    engine = AuditEngine(settings, store)

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.store = store
    app.state.engine = engine

    logger.info(
        "site audit service ready",
        extra={
            "llm_provider": settings.llm_provider,
            "report_llm": settings.report_llm,
            "crawl_preset": settings.crawl_preset,
            "pagespeed_configured": bool(settings.pagespeed_api_key),
        },
    )

    yield

    logger.info("shutting down site audit service")
    await redis_client.aclose()


app = FastAPI(title="Site Audit Service", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
