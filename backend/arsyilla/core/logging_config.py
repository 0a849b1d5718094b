"""Logging setup: JSON lines or plain text on stdout, with secrets scrubbed.

The request context middleware stores the current request id in
``request_id_var``; both formatters pick it up so every line emitted while
serving a request can be correlated.

Anything that looks like a GitHub token or an Arsyilla access key is
replaced before a record is formatted. The configured ``GITHUB_TOKEN`` is
also scrubbed verbatim, whatever its shape.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Iterable, Optional

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

_REDACTED = "***REDACTED***"

# Patterns with a capture group keep the group (the label) and redact the rest.
_SECRET_PATTERNS = [
    re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"),
    re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"),
    re.compile(r"\bBC_[A-Za-z0-9]{8,}\b"),
    re.compile(r"(?i)((?:bearer|token)\s+)[A-Za-z0-9._\-]{20,}"),
    re.compile(r"(?i)((?:x-api-key|api_key|access_key|password|secret|token|authorization)[=:]\s*)[^\s,'\"]{8,}"),
]

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s%(rid)s: %(message)s"


def _scrub(text: str, literals: Iterable[str] = ()) -> str:
    for literal in literals:
        text = text.replace(literal, _REDACTED)
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: (m.group(1) if m.lastindex else "") + _REDACTED, text)
    return text


class _SecretFilter(logging.Filter):
    """Scrub the message template, positional string args and exception text.

    Mapping-style args are left alone; their values are formatted by name
    and callers pass identifiers there, not credentials.
    """

    def __init__(self, literals: Iterable[str] = ()):
        super().__init__()
        self.literals = tuple(s for s in literals if s)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = _scrub(str(record.msg), self.literals)
        if isinstance(record.args, tuple):
            record.args = tuple(
                _scrub(a, self.literals) if isinstance(a, str) else a for a in record.args
            )
        if record.exc_text:
            record.exc_text = _scrub(record.exc_text, self.literals)
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra={...}`` keys become top-level fields."""

    _STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS and key not in entry
        )

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class _TextFormatter(logging.Formatter):
    """Human-readable lines for local development."""

    def __init__(self):
        super().__init__(fmt=_TEXT_FORMAT, datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get()
        record.rid = f" [{request_id}]" if request_id else ""
        return super().format(record)


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    secrets: Iterable[str] = (),
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_level: Standard level name. Defaults to INFO.
        log_format: ``"json"`` (default) or ``"text"``.
        secrets: Literal values to scrub wherever they appear, e.g. the
            configured GitHub token.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter(secrets))
    handler.setFormatter(_JsonFormatter() if fmt == "json" else _TextFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # uvicorn's access log duplicates the request middleware's line.
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
