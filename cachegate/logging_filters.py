"""Logging helpers and filters.

This module centralizes small logging tweaks so they can be applied from
multiple entrypoints (e.g. `python -m cachegate.main` and
`uvicorn cachegate.asgi:app`).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers that would otherwise log every S3 request.
_NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


class SuppressHealthCheckAccessLog(logging.Filter):
    """Drop Uvicorn access log records for the health check endpoint.

    Load balancer probes would otherwise drown out artifact traffic.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (filter)
        # Uvicorn's access logger formats with args:
        #   (client_addr, method, full_path, http_version, status_code)
        try:
            args: Any = record.args
            if isinstance(args, tuple) and len(args) >= 3:
                path = str(args[2])
                if path == "/health" or path.startswith("/health?"):
                    return False

            message = record.getMessage()
            if '"GET /health ' in message or '"HEAD /health ' in message:
                return False
        except Exception:
            # Never break logging.
            return True

        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout and quiet the AWS SDK."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def install_uvicorn_access_log_filters() -> None:
    """Install filters for Uvicorn loggers.

    Safe to call multiple times.
    """

    access_logger = logging.getLogger("uvicorn.access")

    for existing in access_logger.filters:
        if isinstance(existing, SuppressHealthCheckAccessLog):
            return

    access_logger.addFilter(SuppressHealthCheckAccessLog())
