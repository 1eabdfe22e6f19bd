"""
Application configuration.

Process bootstrap settings (where the database lives, log level), loaded
from an optional YAML file and overridden by environment variables.
The site configuration record itself lives in the database.
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError

CONFIG_PATH_ENV = "SITECONF_CONFIG"
DATA_DIR_ENV = "SITECONF_DATA_DIR"
LOG_LEVEL_ENV = "SITECONF_LOG_LEVEL"
DEFAULT_CONFIG_PATH = "app.yaml"
PROJECT_ROOT = Path(__file__).resolve().parents[2]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppConfig(BaseModel):
    data_dir: Path = Path("./data")
    db_filename: str = "siteconf.db"
    migrations_dir: Path = PROJECT_ROOT / "migrations"
    log_level: LogLevel = "INFO"

    @property
    def db_path(self) -> str:
        return str(self.data_dir / self.db_filename)


def load_app_config(path: Path | None = None) -> AppConfig:
    """
    Load application config.

    A missing file yields defaults. Environment variables win over the file.
    Raises ValueError if the file is not valid YAML or fails validation.
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))

    data: dict = {}
    if path.exists():
        with open(path) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML syntax in config file {path}: {e}") from e
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            data = loaded

    if DATA_DIR_ENV in os.environ:
        data["data_dir"] = os.environ[DATA_DIR_ENV]
    if LOG_LEVEL_ENV in os.environ:
        data["log_level"] = os.environ[LOG_LEVEL_ENV].upper()

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Config validation failed:\n{e}") from e


def prepare_data_dir(config: AppConfig) -> None:
    """Create the data directory if needed."""
    config.data_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
