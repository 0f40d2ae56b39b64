"""
Lead Qualifier - FastAPI Application
Main entry point with all routes configured.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lead_qualifier.config import settings
from lead_qualifier.core.exceptions import PersistenceError
from lead_qualifier.database import init_db
from lead_qualifier.api import icp, leads, qualify, outcomes, scoring

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    logger.info("Lead Qualifier API started")
    yield


app = FastAPI(
    title="Lead Qualifier API",
    description="Adaptive lead scoring: ICP feature extraction, weighted scoring and outcome-driven retraining",
    version=VERSION,
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEV_MODE else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leads.router)
app.include_router(icp.router)
app.include_router(qualify.router)
app.include_router(outcomes.router)
app.include_router(scoring.router)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": exc.message}
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": VERSION
    }
