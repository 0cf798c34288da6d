"""Application configuration.

Single source of truth for all configuration values.
Loads from environment variables with .env file support.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# =============================================================================
# VERSION - Read from pyproject.toml (single source of truth)
# =============================================================================


def _get_version() -> str:
    """Read version - prefer pyproject.toml, fall back to installed metadata."""
    try:
        import tomllib

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
                return data.get("project", {}).get("version", "0.0.0")
    except (OSError, KeyError, ValueError):
        pass

    try:
        from importlib.metadata import PackageNotFoundError, version

        try:
            return version("matchrank")
        except PackageNotFoundError:
            pass
    except ImportError:
        pass

    return "0.0.0"


VERSION = _get_version()

# Load .env file from project root
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"
load_dotenv(_ENV_FILE)


# Provider defaults: env prefix, default base URL, default priority (1 = tried first)
PROVIDER_DEFAULTS: dict[str, dict] = {
    "football_data": {
        "env": "FOOTBALL_DATA",
        "url": "https://api.football-data.org/v4",
        "priority": 1,
    },
    "api_football": {
        "env": "API_FOOTBALL",
        "url": "https://v3.football.api-sports.io",
        "priority": 2,
    },
    "apifootball_com": {
        "env": "APIFOOTBALL",
        "url": "https://apiv3.apifootball.com",
        "priority": 3,
    },
    "soccersapi": {
        "env": "SOCCERSAPI",
        "url": "https://api.soccersapi.com/v2.2",
        "priority": 4,
    },
    "tsdb": {
        "env": "THESPORTSDB",
        "url": "https://www.thesportsdb.com/api/v1/json",
        "priority": 99,
    },
}

FREE_PROVIDER = "tsdb"
TSDB_FREE_API_KEY = "123"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def clean_base_url(url: str) -> str:
    """Add an https:// scheme when missing and strip trailing slashes."""
    url = url.strip()
    if not url:
        return url
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


class Config:
    """Application configuration singleton.

    All configuration values should be accessed through this class.
    Values are loaded from environment variables with sensible defaults.
    """

    # Channel timezone used when a channel has none configured
    DEFAULT_CHANNEL_TIMEZONE: str = os.getenv("DEFAULT_CHANNEL_TIMEZONE", "Africa/Addis_Ababa")

    # Provider health / quota re-check interval
    PROVIDER_HEALTH_TTL_SECONDS: int = _env_int("PROVIDER_HEALTH_TTL_SECONDS", 300)

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = _env_float("HTTP_TIMEOUT_SECONDS", 10.0)

    # Concurrency
    AGGREGATOR_MAX_WORKERS: int = _env_int("AGGREGATOR_MAX_WORKERS", 4)
    DETAIL_MAX_WORKERS: int = _env_int("DETAIL_MAX_WORKERS", 6)
    SELECTOR_TIMEOUT_SECONDS: float = _env_float("SELECTOR_TIMEOUT_SECONDS", 30.0)

    # API
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = _env_int("API_PORT", 9280)

    @classmethod
    def get_provider_settings(cls, name: str) -> dict:
        """Get key, URL, priority and daily limit for a provider from the environment."""
        defaults = PROVIDER_DEFAULTS[name]
        prefix = defaults["env"]
        api_key = os.getenv(f"{prefix}_KEY") or os.getenv(f"{prefix}_API_KEY") or ""
        if name == FREE_PROVIDER and not api_key:
            api_key = TSDB_FREE_API_KEY
        return {
            "name": name,
            "api_key": api_key.strip(),
            "base_url": clean_base_url(os.getenv(f"{prefix}_URL") or defaults["url"]),
            "priority": _env_int(f"{prefix}_PRIORITY", defaults["priority"]),
            "daily_limit": _env_int(f"{prefix}_DAILY_LIMIT", 100),
            "username": os.getenv(f"{prefix}_USERNAME") or None,
            "is_active": os.getenv(f"{prefix}_ENABLED", "true").lower() != "false",
        }

    @classmethod
    def reload(cls) -> None:
        """Reload configuration from environment.

        Useful for testing or runtime config changes.
        """
        load_dotenv(_ENV_FILE, override=True)
        cls.DEFAULT_CHANNEL_TIMEZONE = os.getenv("DEFAULT_CHANNEL_TIMEZONE", "Africa/Addis_Ababa")
        cls.PROVIDER_HEALTH_TTL_SECONDS = _env_int("PROVIDER_HEALTH_TTL_SECONDS", 300)
        cls.HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", 10.0)
        cls.AGGREGATOR_MAX_WORKERS = _env_int("AGGREGATOR_MAX_WORKERS", 4)
        cls.DETAIL_MAX_WORKERS = _env_int("DETAIL_MAX_WORKERS", 6)
        cls.SELECTOR_TIMEOUT_SECONDS = _env_float("SELECTOR_TIMEOUT_SECONDS", 30.0)
        cls.API_HOST = os.getenv("API_HOST", "0.0.0.0")
        cls.API_PORT = _env_int("API_PORT", 9280)
