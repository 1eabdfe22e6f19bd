from functools import lru_cache

from fastapi import HTTPException, Request, status

from src.adapters.cache_purge import LoggingCachePurger
from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteConfigRepo
from src.app_shell.config import AppConfig, load_app_config, prepare_data_dir
from src.components.settings import SystemConfigService, create_config_service


# --- Settings ---
@lru_cache
def get_app_config() -> AppConfig:
    return load_app_config()


# --- Services ---
def build_config_service(app_config: AppConfig) -> SystemConfigService:
    """
    Prepare storage and create the process-wide config service.

    Runs pending migrations and creates the default record on first run.
    """
    prepare_data_dir(app_config)
    SQLiteMigrator(app_config.db_path, str(app_config.migrations_dir)).run_migrations()
    return create_config_service(
        repo=SQLiteConfigRepo(app_config.db_path),
        purger=LoggingCachePurger(),
        clock=SystemClock(),
    )


def get_config_service(request: Request) -> SystemConfigService:
    """The config service created at startup."""
    service = getattr(request.app.state, "config_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Configuration store not initialized",
        )
    return service
