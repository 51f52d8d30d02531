# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Error taxonomy for runs.

Every error carries a descriptive message meant to be shown to the caller
as-is. ``CleanupError`` is the exception: it is only ever logged.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from coreason_runner.models import ExecutionResult


class RunnerError(Exception):
    """Base class for all runner errors."""


class ValidationError(RunnerError, ValueError):
    """Input rejected before any resource was allocated."""


class ResourceSetupError(RunnerError, RuntimeError):
    """Workspace, environment, image or container could not be prepared."""


class ExecutionError(RunnerError):
    """The submitted code or image ran and failed.

    Attributes:
        result: The captured streams and exit status, when available.
    """

    def __init__(self, message: str, result: "ExecutionResult | None" = None):
        super().__init__(message)
        self.result = result


class ExecutionTimeoutError(ExecutionError, TimeoutError):
    """The run exceeded its deadline and was terminated."""


class CleanupError(RunnerError):
    """Removal of a run-owned resource failed.

    Attributes:
        resource: Kind of resource ("workspace", "image", "container").
        name: Identifier of the leaked resource.
    """

    def __init__(self, resource: str, name: str, cause: BaseException):
        super().__init__(f"Failed to remove {resource} {name}: {cause}")
        self.resource = resource
        self.name = name
        self.__cause__ = cause


class ContainerControlError(RunnerError):
    """A control operation (stop) on a running container failed."""
