"""Travel Memory Map: FastAPI backend."""
import logging
import os
import subprocess
import sys

from fastapi import FastAPI

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api import export, geocoding, locations, photos, routes, stats
from schemas.health import HealthResponse
from utils.config import CORS_ORIGINS, PHOTO_STORAGE_DIR, PORT

LOG = logging.getLogger("main")

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))

app = FastAPI(
    title="Travel Memory Map",
    description="Pinned travel memories with photos, geocoding, stats and map export",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (routes, locations, photos, geocoding, stats, export):
    app.include_router(module.router, prefix="/api")

# Uploaded photos are public by URL; the upload route hands out links under this mount.
os.makedirs(PHOTO_STORAGE_DIR, exist_ok=True)
app.mount("/photos", StaticFiles(directory=PHOTO_STORAGE_DIR), name="photos")


def _run_migrations() -> None:
    """Bring the schema to head with the Alembic CLI (same interpreter, backend as cwd)."""
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=BACKEND_DIR,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")
    LOG.info("Database schema is at head")


@app.on_event("startup")
def startup() -> None:
    _run_migrations()


@app.get("/api/health", response_model=HealthResponse)
def api_health() -> HealthResponse:
    """Explicit health route so /api/health is always available."""
    return HealthResponse()


@app.get("/")
def root() -> dict:
    return {"service": "travel-memory-map", "docs": "/docs", "health": "/api/health"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
