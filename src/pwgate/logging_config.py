# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging configuration for the gate and the uvicorn server running it."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict

# header.payload.signature, base64url segments; JWT headers always start with "eyJ"
_TOKEN_RE = re.compile(r"eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
REDACTED = "[redacted-token]"


class SessionTokenRedactionFilter(logging.Filter):
    """Replace anything that looks like a session token in a log line."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _TOKEN_RE.sub(REDACTED, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """dictConfig mapping: one stdout handler, tokens redacted, uvicorn and pwgate at ``level``."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact_tokens": {"()": SessionTokenRedactionFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["redact_tokens"],
            },
        },
        "loggers": {
            "pwgate": {"handlers": ["stdout"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["stdout"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["stdout"], "level": level, "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": ["stdout"]},
    }
