import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from community_media.adapters.fs.filestore import StorageGateway
from community_media.adapters.sqlite.migrator import SQLiteMigrator
from community_media.api.deps import get_settings
from community_media.rules.loader import load_rules

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, prepare storage and schema on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        StorageGateway(rules.media.storage.root)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Community Media API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from community_media.api.routes import assets, partners  # noqa: E402

app.include_router(assets.router, prefix="/api/owners", tags=["Assets"])
app.include_router(partners.router, prefix="/api/partners", tags=["Partners"])
app.include_router(assets.public_router, prefix="/uploads", tags=["Uploads Public"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
