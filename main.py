"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp webhook (subscription challenge + message delivery)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Config
from infra import bootstrap_infrastructure, install_fatal_excepthook
from transport.whatsapp.webhook import router as whatsapp_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    install_fatal_excepthook()
    infra = bootstrap_infrastructure()

    logger.info("=" * 60)
    logger.info("🚀 Starting Alpha WhatsApp AI...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"Backends: {infra!r}")
    missing = Config.missing()
    if missing:
        logger.warning(f"Missing configuration: {', '.join(missing)}")
    logger.info("=" * 60)

    yield

    logger.info("Alpha shutting down...")
    await infra.transport.aclose()


# Create FastAPI app
app = FastAPI(
    title="Alpha Gateway API",
    description="WhatsApp gateway to a language model with human escalation",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(whatsapp_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (process manager liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check."""
    missing = Config.missing()
    if missing:
        return {"status": "not_ready", "missing": missing}
    return {"status": "ready"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Alpha Gateway API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "whatsapp_challenge": "GET /webhook/whatsapp",
            "whatsapp_webhook": "POST /webhook/whatsapp",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=Config.AGENT_PORT,
    )
