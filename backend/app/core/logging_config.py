"""
Logging setup for the Employee Directory API.

Production writes one JSON object per line; development writes colored
single-line records. Records emitted while a request is being served carry
that request's id, so an operation's outcome can be matched to the HTTP
request that triggered it.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from app.core.config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = b"x-request-id"

# Attributes every LogRecord has; anything else was passed through ``extra``
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}

_QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being served, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation in production."""

    def __init__(self, service_name: str = "employee-api"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "service": self.service_name,
            "env": settings.ENVIRONMENT,
            "request_id": getattr(record, "request_id", None),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["error"] = {
                "type": exc_type.__name__ if exc_type else None,
                "value": str(exc_value),
                "trace": self.formatException(record.exc_info),
            }

        fields = {key: value for key, value in vars(record).items() if key not in _STANDARD_ATTRS}
        if fields:
            entry["fields"] = fields

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Readable single-line output for local development."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        when = self.formatTime(record, "%H:%M:%S")
        request_id = getattr(record, "request_id", None) or "-"

        line = f"{color}{when} {record.levelname:<8} [{request_id}] {record.name}: {record.getMessage()}{self.RESET}"
        if record.exc_info:
            last_line = self.formatException(record.exc_info).splitlines()[-1]
            line += f"\n{color}  {last_line}{self.RESET}"
        return line


def setup_logging(
    service_name: str = "employee-api",
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        service_name: Value of the ``service`` field in JSON records
        log_level: Override the level (defaults to DEBUG when settings.DEBUG is on)
        json_logs: Force JSON output on or off (defaults to on in production)
    """
    level = (log_level or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    if json_logs is None:
        json_logs = settings.is_production

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JSONFormatter(service_name) if json_logs else ColoredFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("employee_api.logging").debug(
        f"Logging ready: level={level}, json={json_logs}, environment={settings.ENVIRONMENT}"
    )


def generate_request_id() -> str:
    """Short random id; enough to correlate the lines of one request."""
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware:
    """
    Pure ASGI middleware that gives every HTTP request an id, echoes it in
    the ``X-Request-ID`` response header, and logs one line per request.
    """

    SKIP_PATHS = frozenset({"/health"})

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger("employee_api.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        token = request_id_var.set(request_id)
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        status_code = 500  # if the app dies before starting a response

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                message["headers"] = [*message.get("headers", []), (REQUEST_ID_HEADER, request_id.encode())]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            path = scope.get("path", "")
            if path not in self.SKIP_PATHS:
                elapsed_ms = (time.perf_counter() - started) * 1000
                method = scope.get("method", "")
                self.logger.log(
                    logging.WARNING if status_code >= 400 else logging.INFO,
                    f"{method} {path} -> {status_code} ({elapsed_ms:.1f}ms)",
                    extra={
                        "http_method": method,
                        "http_path": path,
                        "http_status": status_code,
                        "duration_ms": round(elapsed_ms, 1),
                    },
                )
            request_id_var.reset(token)
