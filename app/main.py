# /app/main.py

# --- Core Imports ---
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

# --- Application-specific Imports ---
from . import config
from .db.database import SessionLocal
from .routers import admin_router, genre_router
from .services.genre_service import GenreService

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    genre_service = GenreService.create(
        SessionLocal,
        snapshot_path=config.ADVANCED_GENRES_SNAPSHOT_PATH,
        use_snapshot_file=config.IS_DEVELOPMENT,
    )
    app.state.genre_service = genre_service
    app.state.snapshot_stores = [genre_service.store]

    # Warm the snapshot once at startup. If the database is unreachable the
    # store simply stays empty and populates on the first request.
    try:
        await genre_service.store.populate()
    except SQLAlchemyError as e:
        logger.warning("Could not warm the advanced genre snapshot at startup: %s", e)
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Islamic Library Content API",
    description="Books, authors and the advanced genre taxonomy of the digitized library.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(genre_router.router, prefix="/genre", tags=["Advanced Genres"])
app.include_router(admin_router.router, tags=["Admin"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Content API is running!", "version": app.version}
