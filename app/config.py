# /app/config.py

"""
Central place for the environment-driven settings of the content API.
Values are read once at import time; a local `.env` file is honoured for
development.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./test.db")

# --- Environment Detection ---
APP_ENV = os.getenv("APP_ENV", "production").lower()
IS_DEVELOPMENT = APP_ENV == "development"

# --- Local Snapshot Cache (development only) ---
CACHE_DIR = Path(os.getenv("CACHE_DIR", ".cache"))
ADVANCED_GENRES_SNAPSHOT_PATH = CACHE_DIR / "advanced-genres.json"

# --- Admin ---
# Bearer token guarding the cache reset endpoint. Unset means nobody gets in.
DASHBOARD_PASSWORD = os.getenv("DASHBOARD_PASSWORD")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
