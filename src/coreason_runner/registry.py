# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from coreason_runner.exceptions import ValidationError


class RunRegistry:
    """Maps active run ids to the name of the container serving them.

    Lets a stop request target one specific run instead of a name filter.
    Shared by every runner in the process; entries live only while the
    container does.
    """

    def __init__(self) -> None:
        self._containers: dict[str, str] = {}
        self._lock = threading.Lock()

    @contextmanager
    def track(self, run_id: str, container_name: str) -> Iterator[None]:
        """Register ``run_id`` for the duration of the block.

        Raises:
            ValidationError: If the run id is already active.
        """
        with self._lock:
            if run_id in self._containers:
                raise ValidationError(f"Run {run_id} is already active")
            self._containers[run_id] = container_name
        logger.debug(f"Tracking run {run_id} as container {container_name}")
        try:
            yield
        finally:
            with self._lock:
                self._containers.pop(run_id, None)

    def container_name(self, run_id: str) -> str | None:
        with self._lock:
            return self._containers.get(run_id)

    def active(self) -> dict[str, str]:
        with self._lock:
            return dict(self._containers)

    def clear(self) -> None:
        with self._lock:
            self._containers.clear()


registry = RunRegistry()
