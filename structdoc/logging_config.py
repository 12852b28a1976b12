from __future__ import annotations

"""Central logging configuration for structdoc.

The library itself never configures logging on import. Front ends and test
harnesses call :func:`setup_logging` once at start-up.
"""

import logging
import logging.config
import os

from structdoc.config import ConfigManager

__all__ = ["setup_logging"]

# Loggers switched to DEBUG by STRUCTDOC_DEBUG_DRAG
_DRAG_LOGGERS = (
    "structdoc.core.services.hotzone_service",
    "structdoc.core.services.drop_service",
)


def setup_logging() -> None:
    """Configure logging using the ``logging`` section of the YAML config."""
    log_dir = os.environ.get("STRUCTDOC_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "structdoc.log")

    try:
        logging_config = ConfigManager().get_logging_config()

        if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
            if "handlers" in logging_config and "file" in logging_config["handlers"]:
                logging_config["handlers"]["file"]["filename"] = log_file

            logging.config.dictConfig(logging_config)
            logging.info("===== Logging initialised from config files =====")
        else:
            _setup_minimal_logging()
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as exc:
        # dictConfig reports bad sections through these
        print(f"Error loading logging config: {exc}")
        _setup_minimal_logging()

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Set up minimal console-only logging when config is unavailable."""
    minimal_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": "INFO",
            },
        },
        "root": {
            "level": "INFO",
            "handlers": ["console"],
        },
        # Drag loggers get their own entry so the env override can flip them
        "loggers": {
            name: {"handlers": ["console"], "level": "INFO", "propagate": False}
            for name in _DRAG_LOGGERS
        },
    }

    logging.config.dictConfig(minimal_config)
    logging.error("===== Logging initialised with minimal fallback (config error) =====")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _apply_debug_overrides() -> None:
    """Apply environment-driven module-specific debug overrides.

    Supports:
    - STRUCTDOC_DEBUG_DRAG=true  -> DEBUG for the hotzone and drop services
    - STRUCTDOC_DEBUG_MODULES=comma,separated,logger,names -> DEBUG for listed loggers
    """
    targets = []
    if _env_flag("STRUCTDOC_DEBUG_DRAG"):
        targets.extend(_DRAG_LOGGERS)
    extra_modules = os.environ.get("STRUCTDOC_DEBUG_MODULES", "").strip()
    if extra_modules:
        targets.extend(m.strip() for m in extra_modules.split(",") if m.strip())

    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        has_debug_handler = any(h.level <= logging.DEBUG for h in logger.handlers)
        if not has_debug_handler:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            logger.addHandler(handler)
        logger.info("Debug override active for logger '%s'", name)
