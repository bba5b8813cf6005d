"""
Storefront Chat Agent Backend.

ARCHITECTURE:
- WhatsApp webhook: customer messages in, grounded replies out
- FastAPI Backend: intent classification, merchant context, reply synthesis
- SQL DB: merchants, catalog, orders, append-only webhook audit

SAFETY MODEL:
- LLM used for intent classification and reply wording only
- The pipeline narrates order state, it never creates or changes orders
- Every inbound message is audited before any reply is sent
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import ai, webhook
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    1. Initialize database tables
    2. Warn when the generation backend or webhook secret is not configured
    """
    try:
        logger.info(f"Initializing database ({settings.ENVIRONMENT})...")
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Startup error: {e}", exc_info=True)

    if not settings.generation_configured():
        logger.warning(
            f"AI provider '{settings.AI_PROVIDER}' has no credentials. "
            "Every message will be answered with a configuration error until they are set."
        )
    if not settings.VERIFY_TOKEN:
        logger.warning("VERIFY_TOKEN not set - webhook verification will be refused")

    yield


app = FastAPI(
    title="Storefront Chat Agent API",
    description="Intent-classified, merchant-grounded replies for WhatsApp storefronts.",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],  # Explicit headers only
    max_age=600,  # Cache preflight for 10 minutes
)


# SECURITY: Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"  # Prevent MIME sniffing
    response.headers["X-Frame-Options"] = "DENY"  # Prevent clickjacking
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(ai.router, prefix="/ai", tags=["ai"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])


@app.get("/")
def root():
    return {
        "name": "Storefront Chat Agent",
        "version": "0.1.0",
        "endpoints": ["POST /ai/intent", "GET /webhook", "POST /webhook", "GET /health"],
        "authentication": "Bearer API token on /ai/intent",
    }


@app.get("/health")
def health():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
