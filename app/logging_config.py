"""
Structured Logging Configuration

Features:
  - JSON-formatted logs in production / staging, human-readable in development
  - Request / project / user context carried through contextvars
  - Secret and e-mail masking (OpenAI keys, tokens, passwords)
  - Structured ``extra`` fields (analytics properties, scaffold stages) kept in JSON output
"""

import json
import logging
import re
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from app.config import settings

# ── Context variables for request tracking ──
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
project_id_ctx: ContextVar[str] = ContextVar("project_id", default="-")
user_id_ctx: ContextVar[str] = ContextVar("user_id", default="-")

# Attributes every LogRecord carries; anything else came from ``extra=``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "request_id"}


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


# ═══════════════════════════════════════════
#  Secret masking
# ═══════════════════════════════════════════

_EMAIL_PATTERN = re.compile(r'([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})')
_OPENAI_KEY_PATTERN = re.compile(r'sk-[A-Za-z0-9_-]{12,}')

_REDACT_PATTERNS = [
    (re.compile(r'("?(password|token|secret|api_key|authorization)"?\s*[:=]\s*)"[^"]*"', re.I), r'\1"***"'),
]


def _mask_email(match: re.Match) -> str:
    local, domain = match.group(1), match.group(2)
    if len(local) <= 2:
        return f"{local[0]}***@{domain}"
    return f"{local[0]}***{local[-1]}@{domain}"


def mask_pii(text: str) -> str:
    """Mask credentials and e-mail addresses in log messages."""
    for pattern, replacement in _REDACT_PATTERNS:
        text = pattern.sub(replacement, text)
    text = _OPENAI_KEY_PATTERN.sub("sk-***", text)
    return _EMAIL_PATTERN.sub(_mask_email, text)


# ═══════════════════════════════════════════
#  Formatters
# ═══════════════════════════════════════════

class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S.000Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_pii(record.getMessage()),
            "request_id": request_id_ctx.get(),
            "project_id": project_id_ctx.get(),
            "user_id": user_id_ctx.get(),
        }

        extras = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extras:
            log_entry["extra"] = extras

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry = {k: v for k, v in log_entry.items() if v and v != "-"}
        return json.dumps(log_entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """Readable single-line formatter for development."""

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | [%(request_id)s] %(message)s"

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_ctx.get()
        return super().format(record)


# ═══════════════════════════════════════════
#  Setup
# ═══════════════════════════════════════════

def setup_logging() -> None:
    """Configure application-wide logging."""
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if settings.is_production or settings.is_staging:
        handler.setFormatter(JSONFormatter())
        root.setLevel(logging.INFO)
    else:
        handler.setFormatter(HumanFormatter(HumanFormatter.FORMAT, datefmt="%H:%M:%S"))
        root.setLevel(logging.DEBUG)

    root.addHandler(handler)

    # Quiet noisy third-party loggers
    for name in ("uvicorn.access", "httpcore", "httpx", "openai", "asyncio", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)
