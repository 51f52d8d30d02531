# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Logging setup.

Importing this module configures three loguru sinks: human-readable stderr,
a JSON application log, and a JSON cleanup log that only receives records
bound with ``channel="cleanup"`` (resources a run failed to remove).
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from coreason_runner.cleanup import CLEANUP_CHANNEL
from coreason_runner.config import RunnerConfig

__all__ = ["logger"]

LOG_DIR = Path("logs")


def _is_cleanup(record: Any) -> bool:
    return bool(record["extra"].get("channel") == CLEANUP_CHANNEL)


def setup_logging(level: str | None = None) -> None:
    level = level or RunnerConfig().log_level

    logger.remove()
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger.add(sys.stderr, level=level)
    logger.add(
        LOG_DIR / "app.log",
        level=level,
        rotation="500 MB",
        retention="10 days",
        serialize=True,
        enqueue=True,
    )
    logger.add(
        LOG_DIR / "cleanup.log",
        level="WARNING",
        filter=_is_cleanup,
        rotation="100 MB",
        retention="30 days",
        serialize=True,
        enqueue=True,
    )


setup_logging()
