import json
import logging
import os

LOG_LEVEL_ENV = "PUTTLAB_LOG_LEVEL"


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record):
        entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("seed", "shot", "job_id"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_configured = False


def configure_logging(level=None, json_format: bool = False) -> None:
    """
    Configure the root logger once. Level defaults to $PUTTLAB_LOG_LEVEL
    (INFO when unset).
    """
    global _configured
    level = (level or os.environ.get(LOG_LEVEL_ENV, "INFO"))
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger()
    if not _configured:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
        _configured = True
    root.setLevel(level)
    if json_format and root.handlers:
        root.handlers[0].setFormatter(JsonFormatter())


def get_logger(name):
    """Return a named logger (handlers are the application's business)."""
    return logging.getLogger(name)
