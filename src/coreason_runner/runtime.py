# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from abc import ABC, abstractmethod

from coreason_runner.models import ExecutionResult, RunRequest


class ExecutionStrategy(ABC):
    """
    Abstract base class for isolation strategies (e.g., Docker, venv).
    Follows the Strategy Pattern.

    Attributes:
        name: Configuration name of the strategy.
        label: Prefix used when rendering results to the caller.
        stderr_is_failure: Whether stderr output on a clean exit counts as failure.
    """

    name: str
    label: str
    stderr_is_failure: bool = False

    @abstractmethod
    async def execute(self, run: RunRequest) -> ExecutionResult:
        """Run the request's code in a fresh sandbox and capture output.

        Every resource created for the run is released before returning,
        whether execution succeeded or not.

        Args:
            run: The run to execute.

        Returns:
            ExecutionResult: Captured streams and exit status.

        Raises:
            ResourceSetupError: If the sandbox could not be prepared. Callers
                may fall back to another strategy.
            ExecutionTimeoutError: If the run exceeded its deadline.
            ExecutionError: If supervision of the run failed.
        """
        pass  # pragma: no cover
