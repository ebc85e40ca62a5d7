"""Observability utilities (redaction, access logging, error log file)."""

from cachegate.observability.access_log import log_unauthorized_request
from cachegate.observability.error_log_file import log_storage_error, setup_error_log_file

__all__ = [
    "log_storage_error",
    "log_unauthorized_request",
    "setup_error_log_file",
]
