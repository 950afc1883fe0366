from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

SENSITIVE_KEYS = ("password", "secret", "token", "authorization")
REDACTED = "***REDACTED***"


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return redact(value)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def redact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``values`` with secret-looking entries masked, recursively."""
    redacted: Dict[str, Any] = {}
    for key, value in values.items():
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            redacted[key] = REDACTED
        else:
            redacted[key] = _redact_value(value)
    return redacted


class JsonAuditLogger:
    """Structured logger for audit and operational events.

    Every event is emitted as one JSON document. The tenant and the run's
    correlation id are attached to each event; ``bind`` sets them once the
    run starts.

    A JSON handler writing to ``stream`` (stderr by default) is installed only
    when the named logger has no handlers yet. Later instances sharing the
    name reuse the existing handler and ignore ``stream``; pass a distinct
    ``name`` to log to a different stream.
    """

    def __init__(
        self,
        name: str = "graph_user_admin",
        level: int = logging.INFO,
        tenant_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        stream: Optional[IO[str]] = None,
    ):
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler(stream or sys.stderr)
            handler.setFormatter(_JsonFormatter())
            self.logger.addHandler(handler)
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.tenant_id = tenant_id
        self.correlation_id = correlation_id

    def bind(self, tenant_id: Optional[str] = None, correlation_id: Optional[str] = None) -> None:
        if tenant_id is not None:
            self.tenant_id = tenant_id
        if correlation_id is not None:
            self.correlation_id = correlation_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        fields: Dict[str, Any] = {}
        if self.tenant_id:
            fields["tenant_id"] = self.tenant_id
        if self.correlation_id:
            fields["correlation_id"] = self.correlation_id
        fields.update(redact(kwargs))
        self.logger.log(level, message, extra={"extra": fields})

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra: Optional[Dict[str, Any]] = getattr(record, "extra", None)  # type: ignore[attr-defined]
        if extra:
            payload.update(extra)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)
