"""
Configuration management for the Rack Tracker application.

This module handles:
- Data directory configuration
- Store backend selection (json, sqlite, memory)
- Environment-specific configuration (development vs. production)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
)

logger = logging.getLogger(__name__)

ENV_ENVIRONMENT = "RACK_TRACKER_ENV"
ENV_STORE = "RACK_TRACKER_STORE"
ENV_DATA_DIR = "RACK_TRACKER_DATA_DIR"

STORE_BACKENDS = ("json", "sqlite", "memory")


class Config:
    """
    Application configuration manager.

    Handles data locations, the store backend and environment settings.
    """

    def __init__(
        self,
        environment: str = "production",
        store_backend: Optional[str] = None,
        data_dir: Optional[Path] = None,
    ):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
            store_backend: 'json', 'sqlite' or 'memory'. If None, uses
                RACK_TRACKER_STORE or defaults to 'json'.
            data_dir: Directory for data files. If None, uses
                RACK_TRACKER_DATA_DIR or the environment default.

        Raises:
            ValueError: If store_backend is not a known backend
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION

        if store_backend is None:
            store_backend = os.environ.get(ENV_STORE, "json")
        store_backend = store_backend.strip().lower()
        if store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend: {store_backend}. Must be one of: {STORE_BACKENDS}"
            )
        self._store_backend = store_backend

        # Determine base directory
        if data_dir is not None:
            self._data_dir = Path(data_dir)
        elif os.environ.get(ENV_DATA_DIR):
            self._data_dir = Path(os.environ[ENV_DATA_DIR])
        elif environment == "development":
            self._data_dir = self._get_project_data_dir()
        else:
            self._data_dir = self._get_user_documents_dir()

        self._database_path = self._data_dir / DATABASE_FILENAME

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """
        Get the user's Documents directory for production.

        Returns:
            Path to user's Documents folder with app subdirectory
        """
        return Path.home() / "Documents" / "RackTracker"

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def store_backend(self) -> str:
        """Configured store backend name."""
        return self._store_backend

    @property
    def data_dir(self) -> Path:
        """Directory holding the JSON collections or the SQLite file."""
        return self._data_dir

    @property
    def database_path(self) -> Path:
        """Full path to the SQLite database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(environment='{self.environment}', "
            f"store_backend='{self._store_backend}', data_dir='{self._data_dir}')"
        )


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    RACK_TRACKER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
