"""Centralized logging configuration for matchrank.

Call setup_logging() once at process startup (the API lifespan does this).

Usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("[AGGREGATOR] Fetched %d matches", count)

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    LOG_DIR: Directory for log files (default: <project root>/logs)
    LOG_FORMAT: "text" or "json" (default: text)
"""

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

_configured = False

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = [
    "uvicorn.access",
    "httpx",
    "httpcore",
    "httpcore.connection",
    "httpcore.http11",
    "hpack",
]


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def _get_log_dir() -> Path:
    """Determine log directory."""
    if env_dir := os.getenv("LOG_DIR"):
        return Path(env_dir)

    # Walk up from this file to the project root (where pyproject.toml is)
    current = Path(__file__).parent
    for _ in range(4):
        if (current / "pyproject.toml").exists():
            return current / "logs"
        current = current.parent

    return Path("logs")


def _get_log_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _get_formatter(use_json: bool = False) -> logging.Formatter:
    if use_json:
        return JSONFormatter()

    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    log_level: str | None = None,
    log_dir: str | Path | None = None,
    use_json: bool | None = None,
    log_to_file: bool = True,
) -> None:
    """Initialize the logging system.

    Safe to call multiple times (subsequent calls are no-ops).

    Args:
        log_level: Override LOG_LEVEL env var
        log_dir: Override LOG_DIR env var
        use_json: Override LOG_FORMAT env var (True for JSON output)
        log_to_file: Set False to log to the console only
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, (log_level or "").upper(), None) or _get_log_level()
    if use_json is None:
        use_json = os.getenv("LOG_FORMAT", "text").lower() == "json"
    formatter = _get_formatter(use_json)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers filter from here
    root_logger.handlers.clear()

    # === Console Handler ===
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_path = Path(log_dir) if log_dir else _get_log_dir()
    if log_to_file:
        log_path.mkdir(parents=True, exist_ok=True)

        # === Main Log File (rotating, always DEBUG) ===
        file_handler = RotatingFileHandler(
            log_path / "matchrank.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # === Error Log File (errors only) ===
        error_handler = RotatingFileHandler(
            log_path / "matchrank_errors.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True

    from matchrank.config import VERSION

    logger = logging.getLogger("matchrank")
    logger.info("[STARTUP] " + "=" * 60)
    logger.info("[STARTUP] matchrank %s - Match Relevance Engine", VERSION)
    logger.info("[STARTUP] Log level: %s", logging.getLevelName(level))
    logger.info("[STARTUP] Log directory: %s", log_path if log_to_file else "(console only)")
    logger.info("[STARTUP] Log format: %s", "JSON" if use_json else "text")
    logger.info("[STARTUP] " + "=" * 60)
