"""Error log file handler and storage failure logging.

Warnings and errors are mirrored into a rotating file so storage outages
that surface to clients as plain 404s can still be diagnosed afterwards.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from cachegate.enums import StorageFailureCode

if TYPE_CHECKING:
    from cachegate.config import GatewayConfig


_error_file_handler: RotatingFileHandler | None = None


def setup_error_log_file(config: "GatewayConfig") -> RotatingFileHandler | None:
    """Setup error log file handler based on configuration.

    Args:
        config: Application configuration with error log settings.

    Returns:
        The configured RotatingFileHandler, or None if disabled.
    """
    global _error_file_handler

    if not config.error_log_file_enabled:
        return None

    if _error_file_handler is not None:
        return _error_file_handler

    log_level = getattr(logging, config.error_log_level.upper(), logging.WARNING)

    log_file = Path(config.error_log_file_path).expanduser()
    if not log_file.is_absolute():
        from cachegate.config import _find_repo_root

        log_file = _find_repo_root(start=Path(__file__)) / log_file
    log_file = log_file.resolve()

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=config.error_log_max_bytes,
            backupCount=config.error_log_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Warning: Cannot create error log file {log_file}: {e}", file=sys.stderr)
        return None

    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logging.getLogger().addHandler(handler)
    _error_file_handler = handler

    logging.getLogger(__name__).info(
        "Error log file handler initialized: %s (level=%s)", log_file, config.error_log_level
    )
    return handler


def log_storage_error(
    operation: str,
    code: StorageFailureCode,
    error: Exception | str,
    *,
    team: str | None = None,
    key: str | None = None,
) -> None:
    """Log an object store failure with its internal classification.

    Missing artifacts are routine cache misses and go out at DEBUG; anything
    else is a WARNING so it lands in the error log file.

    Args:
        operation: Store operation that failed (put/get/head).
        code: Internal failure classification.
        error: The exception or error message.
        team: Optional team scope for context.
        key: Optional storage key for context.
    """
    logger = logging.getLogger(f"cachegate.storage.{operation}")

    context_parts = [f"operation={operation}", f"code={code}"]
    if isinstance(error, Exception):
        context_parts.append(f"error_type={type(error).__name__}")
    if team:
        context_parts.append(f"team={team}")
    if key:
        context_parts.append(f"key={key}")

    level = logging.DEBUG if code == StorageFailureCode.ARTIFACT_MISSING else logging.WARNING
    logger.log(level, "[%s] %s", " ".join(context_parts), error)
