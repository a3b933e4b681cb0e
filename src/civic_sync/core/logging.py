"""Loguru logging configuration.

Every record goes to stderr in a human-readable line.  Run summaries logged by
the sync orchestrator are bound with ``json_output=True`` and the run totals,
and are also written to stderr as serialized JSON for log shippers.  A
rotating ``civic-sync.log`` file is added when ``log_dir`` is provided.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"

JSON_OUTPUT_KEY = "json_output"


def _is_run_summary(record: dict[str, Any]) -> bool:
    return bool(record["extra"].get(JSON_OUTPUT_KEY, False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks, replacing any configured before.

    Args:
        log_level: Minimum log level to emit (case-insensitive).
        log_dir: Optional directory for log files.  When set, a rotating
            file sink is added (rotated every 24 hours, retained 7 days).
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, serialize=False)
    logger.add(sys.stderr, level=level, serialize=True, filter=_is_run_summary)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "civic-sync.log",
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
