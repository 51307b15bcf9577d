"""Structured logging configuration for PDF Vault.

JSON lines in production, plain text in development. The request id set by
the request context middleware is attached to every record emitted while
that request is being served.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


# Set by the request context middleware, read by the formatter.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")


class _JsonFormatter(logging.Formatter):
    """Emit each log record as a single JSON line.

    ``extra`` fields passed by the caller are merged into the top-level
    object, e.g. ``logger.info("Folder mirrored", extra={"folder_id": f.id})``.
    """

    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys())

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = request_id_var.get("")
        if rid:
            payload["request_id"] = rid

        for key, value in record.__dict__.items():
            if key not in self._RESERVED and key not in payload:
                payload[key] = value

        if record.exc_info and "exc_info" not in payload:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


# Credentials for the remote storage account and user passwords travel through
# request bodies and SDK errors; none of them may reach the log stream.
_SECRET_PATTERNS = [
    re.compile(r'(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}'),
    re.compile(
        r'(?i)((?:password|passwd|secret|token|access_token|refresh_token|authorization)["\']?\s*[=:]\s*["\']?)[^\s,\'"]{4,}'
    ),
]

_REDACTED = "***REDACTED***"


class _SecretFilter(logging.Filter):
    """Redact credentials from log messages and exception text."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact(str(record.msg))
        if record.exc_text:
            record.exc_text = self._redact(record.exc_text)
        return True

    @staticmethod
    def _redact(text: str) -> str:
        for pattern in _SECRET_PATTERNS:
            text = pattern.sub(
                lambda m: m.group(1) + _REDACTED if m.lastindex else _REDACTED,
                text,
            )
        return text


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure application-wide logging.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to INFO.
        log_format: ``"json"`` or ``"text"``. Defaults to ``"json"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter())

    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # requests logs every pooled connection at DEBUG; the remote client logs its own calls.
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured", extra={"level": level, "format": fmt})
