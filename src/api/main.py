import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from src.api.deps import build_config_service, get_app_config
from src.api.middleware import install_config_policy
from src.app_shell.config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Load config and open the config store on startup (fail-fast)
    try:
        app_config = get_app_config()
        configure_logging(app_config)
        app.state.config_service = build_config_service(app_config)
        logger.info("Config store ready at %s", app_config.db_path)
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Site Config Admin",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import admin_backup, admin_config, public_site  # noqa: E402

app.include_router(admin_config.router, prefix="/admin/configure", tags=["Admin Config"])
app.include_router(admin_backup.router, prefix="/admin/backup", tags=["Admin Backup"])
app.include_router(public_site.router, prefix="/api/public", tags=["Public"])

install_config_policy(app)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
