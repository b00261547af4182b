"""FormID database file locations."""

import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .constants import APP_NAME, DATABASE_NAMES, ENV_VARS


def get_app_data_directory() -> Path:
    """Platform-specific application data directory.

    CLASSIC_DATA_PATH overrides the platform default.
    """
    override = os.environ.get(ENV_VARS["data_path"])
    if override:
        return Path(override)

    if sys.platform == 'win32':
        app_data = os.environ.get("APPDATA")
        base = Path(app_data) if app_data else Path.home() / "AppData" / "Roaming"
        return base / APP_NAME

    if sys.platform == 'darwin':
        return Path.home() / "Library" / "Application Support" / APP_NAME

    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / APP_NAME


def get_databases_directory() -> Path:
    return get_app_data_directory() / "databases"


def get_formid_database_paths(game: str) -> List[Path]:
    """Main and Local database paths for a game, in lookup order."""
    db_dir = get_databases_directory()
    names = DATABASE_NAMES[game]
    return [db_dir / names["main"], db_dir / names["local"]]


def get_main_formid_database_path(game: str) -> Path:
    return get_formid_database_paths(game)[0]


def get_local_formid_database_path(game: str) -> Path:
    return get_formid_database_paths(game)[1]


def database_exists(db_path) -> bool:
    try:
        return Path(db_path).is_file()
    except OSError:
        return False


def find_available_databases(game: str, custom_paths: Optional[Sequence[str]] = None) -> List[Path]:
    """Existing database files: defaults first, then custom paths."""
    all_paths = get_formid_database_paths(game) + [Path(p) for p in (custom_paths or [])]
    return [db_path for db_path in all_paths if database_exists(db_path)]
