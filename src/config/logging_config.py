import logging
import logging.config
import os

LOG_LEVEL = os.getenv("CAKE_AUTORTT_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("CAKE_AUTORTT_LOG_FILE", "logs/cake-autortt.log")
LOG_FILE_MAX_BYTES = int(os.getenv("CAKE_AUTORTT_LOG_FILE_MAX_BYTES", str(1024 * 1024)))
LOG_FILE_BACKUPS = int(os.getenv("CAKE_AUTORTT_LOG_FILE_BACKUPS", "3"))

# Same layout as the daemon's syslog lines: timestamp, level, origin, message
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"


def build_logging_config(level: str = LOG_LEVEL, log_file: str = LOG_FILE) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "level": level,
        },
    }
    if log_file:
        # Flash-backed routers have little room, keep the file bounded
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUPS,
            "formatter": "detailed",
            "level": level,
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {"format": LOG_FORMAT},
            "console": {"format": CONSOLE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},
        },
        "root": {
            "handlers": list(handlers),
            "level": level,
        },
    }


def setup_logging(debug: bool = False):
    """
    Configure console and rotating file logging. `debug` forces DEBUG on the
    root logger and its handlers regardless of CAKE_AUTORTT_LOG_LEVEL.
    """
    level = "DEBUG" if debug else LOG_LEVEL
    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(level))
