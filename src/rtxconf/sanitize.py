"""Secret redaction for log output."""

from __future__ import annotations

import logging
import re

REDACTED = "[REDACTED]"

_SECRET_PATTERNS = [
    re.compile(r"\b(login|administrator)\s+password\b", re.IGNORECASE),
    re.compile(r"\blogin\s+user\s+\S+\s+\S+", re.IGNORECASE),
    re.compile(r"\bpre-shared-key\b", re.IGNORECASE),
    re.compile(r"\bpp\s+auth\s+(myname|username)\b", re.IGNORECASE),
    re.compile(r"\bl2tp\s+tunnel\s+auth\s+on\s+\S+", re.IGNORECASE),
    re.compile(r"\bsnmp\s+\S*community\b", re.IGNORECASE),
    re.compile(r"\b(password|secret)\b", re.IGNORECASE),
]


def is_sensitive(text: str) -> bool:
    """Return True when a configuration line carries a secret."""
    return any(p.search(text) for p in _SECRET_PATTERNS)


def sanitize_line(text: str) -> str:
    """Replace a secret-bearing configuration line with a marker."""
    return REDACTED if is_sensitive(text) else text


class SanitizingFilter(logging.Filter):
    """Logging filter that redacts secret-bearing configuration lines.

    Both the message template and any string arguments are checked, so
    ``logger.debug("line %d: %s", n, text)`` is safe to emit.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple) and record.args:
            record.args = tuple(
                sanitize_line(a) if isinstance(a, str) else a for a in record.args
            )
        elif isinstance(record.msg, str) and not record.args:
            record.msg = sanitize_line(record.msg)
        return True


def install_sanitizer(logger: logging.Logger | None = None) -> SanitizingFilter:
    """Attach a SanitizingFilter to every handler of a logger."""
    logger = logger or logging.getLogger()
    sanitizer = SanitizingFilter()
    for handler in logger.handlers:
        if not any(isinstance(f, SanitizingFilter) for f in handler.filters):
            handler.addFilter(sanitizer)
    return sanitizer
