"""
FastAPI app entrypoint.

Auction settlement backend: the scheduler settles expired auctions and retries winner
notifications; /admin exposes manual triggers and job control.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.api.routes import admin
from app.config import settings
from app.core.constants import AUCTION_CHECK_INTERVAL_SECONDS
from app.scheduler.manager import job_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    job_manager.initialize()
    if settings.scheduler_enabled:
        job_manager.start()
        logger.info("Auction jobs running; expired auction check every %ss", AUCTION_CHECK_INTERVAL_SECONDS)
    else:
        logger.info("SCHEDULER_ENABLED=false; auction jobs registered but not started")
    app.state.job_manager = job_manager
    yield
    logger.info("Shutting down auction jobs...")
    job_manager.shutdown(wait=True)


app = FastAPI(title="Aarath Auctions", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the admin frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin.router, prefix="/admin", tags=["admin"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Aarath Auctions API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
