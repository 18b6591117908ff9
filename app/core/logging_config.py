"""Logging configuration.

Console logging with optional rotating files and JSON output. Binds lightweight
contextvars (request_id/user_id/ip) to every record so a payment approval can be
traced back to the request and the admin who issued it.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[Optional[int]] = ContextVar("user_id", default=None)
ip_ctx: ContextVar[Optional[str]] = ContextVar("ip_address", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_EXTRA_FIELDS = (
    "user_id",
    "request_id",
    "ip_address",
    "endpoint",
    "method",
    "status_code",
    "duration",
    "payment_kind",
    "payment_id",
)


class JSONFormatter(logging.Formatter):
    """Emit logs as JSON for aggregation (ELK/Loki/etc.)."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ContextEnricher(logging.Filter):
    """Inject contextvars (request_id, user_id, ip_address) into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        request_id = request_id_ctx.get()
        user_id = user_id_ctx.get()
        ip_address = ip_ctx.get()
        if request_id and not hasattr(record, "request_id"):
            record.request_id = request_id
        if user_id and not hasattr(record, "user_id"):
            record.user_id = user_id
        if ip_address and not hasattr(record, "ip_address"):
            record.ip_address = ip_address
        return True


def bind_request_context(
    *,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
):
    """Bind request context into contextvars; returns tokens for reset."""
    tokens = []
    if request_id is not None:
        tokens.append((request_id_ctx, request_id_ctx.set(request_id)))
    if user_id is not None:
        tokens.append((user_id_ctx, user_id_ctx.set(user_id)))
    if ip_address is not None:
        tokens.append((ip_ctx, ip_ctx.set(ip_address)))
    return tokens


def reset_request_context(tokens) -> None:
    """Reset bound contextvars using tokens returned by bind_request_context."""
    for var, token in reversed(tokens):
        var.reset(token)


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter, **kwargs):
    handler = logging.handlers.RotatingFileHandler(
        path, encoding="utf-8", delay=True, **kwargs
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    app_name: str = "educonnect",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    use_json: bool = False,
) -> None:
    """Configure root logging.

    Args:
        log_level: Minimum logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory to store log files; if None, logs only to console.
        app_name: Application name used in log filenames.
        max_bytes: Max size per log file before rotation.
        backup_count: Number of rotated files to keep.
        use_json: If True, use JSON for console and file handlers.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter: logging.Formatter = (
        JSONFormatter() if use_json else logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        try:
            handler.flush()
        finally:
            handler.close()
            root_logger.removeHandler(handler)

    context_filter = ContextEnricher()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        rotation = {"maxBytes": max_bytes, "backupCount": backup_count}

        general_handler = _rotating_handler(
            log_path / f"{app_name}.log", logging.DEBUG, formatter, **rotation
        )
        error_handler = _rotating_handler(
            log_path / f"{app_name}_error.log", logging.ERROR, formatter, **rotation
        )
        for handler in (general_handler, error_handler):
            handler.addFilter(context_filter)
            root_logger.addHandler(handler)

    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info(
        f"Logging configured. Level: {log_level}, Directory: {log_dir or 'console only'}"
    )


def log_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: float,
    ip_address: str,
    user_id: Optional[int] = None,
    request_id: Optional[str] = None,
) -> None:
    """Log an HTTP request with structured data on the `access` logger."""
    logger = logging.getLogger("access")
    extra = {
        "method": method,
        "endpoint": endpoint,
        "status_code": status_code,
        "duration": f"{duration_ms:.2f}",
        "ip_address": ip_address,
    }

    if user_id:
        extra["user_id"] = user_id
    if request_id:
        extra["request_id"] = request_id

    logger.info(f"{method} {endpoint} - {status_code} - {duration_ms:.2f}ms", extra=extra)
