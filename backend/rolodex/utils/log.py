"""Structured logging via *structlog*.

Modules that emit key/value events can ``from rolodex.utils.log import log``
and call ``log.info("event-name", key=value)``.  Output goes through the
standard library so level filtering configured in :mod:`rolodex.main`
applies to both styles.
"""

from __future__ import annotations

from typing import Any

import structlog

if not structlog.is_configured():
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

# Keep the logger global so every import shares the same base instance.
log = structlog.get_logger("rolodex")


def get_logger(**bindings: Any):  # noqa: D401 – factory helper
    """Return a bound logger with optional key/value bindings."""

    return log.bind(**bindings)
