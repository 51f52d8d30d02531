# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""
coreason-runner
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .classifier import classify
from .config import RunnerConfig
from .exceptions import (
    CleanupError,
    ContainerControlError,
    ExecutionError,
    ExecutionTimeoutError,
    ResourceSetupError,
    RunnerError,
    ValidationError,
)
from .factory import RunnerFactory
from .guard import check_code
from .models import ClassifiedResult, ExecutionResult, Outcome, ResourceLimits, RunRequest
from .runner import Runner, RunnerAsync
from .runtime import ExecutionStrategy
from .runtimes.docker import DockerRuntime
from .runtimes.venv import VenvRuntime

__all__ = [
    "ClassifiedResult",
    "CleanupError",
    "ContainerControlError",
    "DockerRuntime",
    "ExecutionError",
    "ExecutionResult",
    "ExecutionStrategy",
    "ExecutionTimeoutError",
    "Outcome",
    "ResourceLimits",
    "ResourceSetupError",
    "RunRequest",
    "Runner",
    "RunnerAsync",
    "RunnerConfig",
    "RunnerError",
    "RunnerFactory",
    "ValidationError",
    "VenvRuntime",
    "check_code",
    "classify",
]
