"""
Customer Risk Analyzer — FastAPI Application Entry Point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from risk_analyzer.api.routes import router
from risk_analyzer.config import (
    API_HOST,
    API_PORT,
    CORS_ORIGINS,
    LOG_LEVEL,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from risk_analyzer.core.worker import BackgroundWorker

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


# ── Startup / Shutdown lifecycle ──────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.worker = BackgroundWorker()
    logger.info("Background worker ready")
    yield
    app.state.worker.terminate()
    app.state.worker = None


app = FastAPI(
    title=SERVICE_NAME,
    description=(
        "Ingests a JSON array of customer records, scores fraud/credit risk per record, "
        "validates records and aggregates summary statistics (valid/invalid counts, top countries)."
    ),
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/", tags=["Root"])
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("risk_analyzer.main:app", host=API_HOST, port=API_PORT)
