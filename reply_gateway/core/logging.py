import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from reply_gateway.core.config import settings

# Attributes every LogRecord carries; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime"}

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
client_ip_ctx_var: ContextVar[str] = ContextVar("client_ip", default="-")
platform_ctx_var: ContextVar[str] = ContextVar("platform", default="-")

# Record attribute name -> context variable feeding it.
_CONTEXT_FIELDS: Dict[str, ContextVar[str]] = {
    "request_id": request_id_ctx_var,
    "client_ip": client_ip_ctx_var,
    "platform": platform_ctx_var,
}

_logging_configured = False


def get_request_id() -> str:
    return request_id_ctx_var.get()


def bind_request_id(request_id: str) -> Token[str]:
    return request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    request_id_ctx_var.reset(token)


def bind_client_ip(client_ip: str) -> Token[str]:
    return client_ip_ctx_var.set(client_ip)


def reset_client_ip(token: Token[str]) -> None:
    client_ip_ctx_var.reset(token)


def get_platform() -> str:
    """Return the platform of the turn being processed, or ``-`` outside a turn."""
    return platform_ctx_var.get()


def bind_platform(platform: str) -> Token[str]:
    return platform_ctx_var.set(platform)


def reset_platform(token: Token[str]) -> None:
    platform_ctx_var.reset(token)


class RequestContextFilter(logging.Filter):
    """
    Copy the request and turn context onto each record.

    Values passed explicitly through ``extra`` win over the context variables,
    so a log call can tag a record with a platform other than the current one.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for name, ctx_var in _CONTEXT_FIELDS.items():
            if not hasattr(record, name):
                setattr(record, name, ctx_var.get())
        record.environment = settings.environment
        return True


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: fixed envelope first, then ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": getattr(record, "environment", settings.environment),
        }
        for name in _CONTEXT_FIELDS:
            log_entry[name] = getattr(record, name, "-")

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_entry["stack"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                log_entry.setdefault(key, value)
        return json.dumps(log_entry, default=str, ensure_ascii=False)


def configure_logging() -> None:
    """Install the stdout (and optional rotating file) handlers on the root logger once."""
    global _logging_configured
    if _logging_configured:
        return

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.log_json:
        formatter: logging.Formatter = JsonLogFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(platform)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_handler = _build_file_handler()
    if file_handler is not None:
        handlers.append(file_handler)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.addFilter(RequestContextFilter())
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = handlers

    logging.captureWarnings(True)
    _logging_configured = True


def _build_file_handler() -> Optional[logging.Handler]:
    """Rotating file handler for LOG_FILE_PATH; None when the path is empty or unusable."""
    if not settings.log_file_path:
        return None

    log_path = Path(settings.log_file_path)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            log_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
        )
    except OSError as exc:  # pragma: no cover - filesystem-specific
        logging.getLogger(__name__).warning(
            "File logging disabled, cannot open %s: %s", log_path, exc
        )
        return None
