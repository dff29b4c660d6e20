# bemanning/core/logging_config.py
"""
Logging för schematjänsten.

Produktion: en JSON-post per rad till roterande filer (allt och bara fel),
varningar även till stdout. Utveckling: färgad konsol plus en textfil.

Motorer märker sina poster med år/månad via LogContext, request-middleware
lägger till request-id, metod, sökväg och svarstid.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path

from bemanning.core.config import IS_PRODUCTION, LOG_DIR_NAME, LOG_LEVEL

LOG_DIR = Path(LOG_DIR_NAME)

APP_LOG_FILE = LOG_DIR / "app.log"
ERROR_LOG_FILE = LOG_DIR / "error.log"

#: (attribut på posten, nyckel i JSON) för fält som sätts av LogContext.
_CONTEXT_FIELDS = (
    ("person_id", "person_id"),
    ("year", "year"),
    ("month", "month"),
    ("mode", "mode"),
)

#: Tredjepartsloggrar och deras nivå.
_LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "watchfiles": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}

_TEXT_FORMAT = "%(levelname)s %(asctime)s [%(name)s:%(lineno)d] %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(asctime)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """En JSON-post per rad för loggaggregering."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for attr, key in _CONTEXT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                entry[key] = value

        # extra={"extra_fields": {...}} vinner över kontextfälten
        entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Konsolformat för utveckling, nivån färgas med ANSI-koder."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        plain = record.levelname
        color = self.COLORS.get(plain)
        if color:
            record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _rotating(path: Path, level: int, formatter: logging.Formatter, max_mb: int, backups: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_mb * 1_000_000, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _stdout(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _root_level() -> int:
    if LOG_LEVEL and isinstance(logging.getLevelName(LOG_LEVEL), int):
        return logging.getLevelName(LOG_LEVEL)
    return logging.INFO if IS_PRODUCTION else logging.DEBUG


def setup_logging() -> None:
    """Konfigurerar rotloggern. Anropas en gång vid start, före allt annat som loggar."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(_root_level())

    if IS_PRODUCTION:
        json_formatter = JSONFormatter()
        handlers = [
            _rotating(APP_LOG_FILE, logging.INFO, json_formatter, max_mb=10, backups=5),
            _rotating(ERROR_LOG_FILE, logging.ERROR, json_formatter, max_mb=10, backups=10),
            _stdout(logging.WARNING, json_formatter),
        ]
    else:
        handlers = [
            _stdout(logging.DEBUG, ColoredFormatter(fmt=_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)),
            _rotating(APP_LOG_FILE, logging.DEBUG, logging.Formatter(_TEXT_FORMAT), max_mb=5, backups=2),
        ]

    for handler in handlers:
        root_logger.addHandler(handler)

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "extra_fields": {
                "log_dir": str(LOG_DIR.absolute()),
                "production": IS_PRODUCTION,
                "level": logging.getLevelName(root_logger.level),
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Sätter extra fält på alla loggposter inom blocket.

        with LogContext(year=2026, month=3):
            logger.info("Role engine run")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._previous = None

    def __enter__(self):
        self._previous = logging.getLogRecordFactory()
        previous = self._previous
        fields = self.fields

        def factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            for key, value in fields.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous)
