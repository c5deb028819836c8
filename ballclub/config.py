"""Club configuration management."""

from functools import lru_cache
from pathlib import Path

from .constants import CONFIG_PATH, PROJECT_DIR
from .schemas import ClubConfig
from .utils import load_json


@lru_cache(maxsize=1)
def get_config() -> ClubConfig:
    """
    Load club configuration from data/club_config.json.

    Falls back to ClubConfig defaults when the file doesn't exist.
    Configuration is cached after first load.

    Raises:
        ValueError: If the config file has an invalid structure
    """
    if not CONFIG_PATH.exists():
        return ClubConfig()
    return load_json(CONFIG_PATH, schema=ClubConfig)


def project_path(value: str | Path) -> Path:
    """A configured path; relative paths are taken from the project root."""
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_DIR / path
    return path


def get_data_dir() -> Path:
    """Data directory from config, resolved against the project root."""
    return project_path(get_config().data_dir)


def should_seed_mock_data() -> bool:
    """Whether empty stores are seeded with the mock club."""
    return get_config().seed_mock_data


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime.
    """
    get_config.cache_clear()
