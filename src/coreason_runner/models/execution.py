# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Data models for runs and their results."""

import math
import re
from enum import Enum
from typing import Any, TypeVar
from uuid import uuid4

import pydantic
from docker.errors import DockerException
from docker.utils import parse_bytes
from packaging.requirements import InvalidRequirement, Requirement
from pydantic import BaseModel, Field, field_validator

from coreason_runner.exceptions import ValidationError

# Smallest CPU share the daemon accepts
MIN_CPUS = 0.01
# Docker container names: [a-zA-Z0-9][a-zA-Z0-9_.-]
_RUN_ID_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")

M = TypeVar("M", bound=BaseModel)


def build_model(model: type[M], **data: Any) -> M:
    """Instantiate a model, reporting bad input as a runner ValidationError."""
    try:
        return model(**data)
    except pydantic.ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid {model.__name__}: {messages}") from e


def parse_requirements(requirements: str | list[str] | None) -> list[str]:
    """Parse a comma-separated dependency list.

    Entries are trimmed, empty entries dropped and duplicates removed keeping
    the first occurrence. Each entry must be a valid PEP 508 requirement.

    Raises:
        ValidationError: If an entry is not a valid requirement.
    """
    if requirements is None:
        return []
    raw = requirements.split(",") if isinstance(requirements, str) else requirements

    parsed: list[str] = []
    for item in raw:
        name = item.strip()
        if not name or name in parsed:
            continue
        try:
            Requirement(name)
        except InvalidRequirement as e:
            raise ValidationError(f"Invalid package requirement: {name}") from e
        parsed.append(name)
    return parsed


class ResourceLimits(BaseModel):
    """Constraints applied to a running sandbox.

    Attributes:
        memory: Memory ceiling in Docker size syntax (e.g. "512m").
        cpus: CPU ceiling as a decimal number of cores (e.g. "1", "0.5").
        network_disabled: Whether all network access is removed.
    """

    memory: str = "512m"
    cpus: str = "1"
    network_disabled: bool = True

    @field_validator("memory")
    @classmethod
    def _check_memory(cls, value: str) -> str:
        value = value.strip()
        try:
            size = parse_bytes(value)
        except (DockerException, OverflowError, ValueError) as e:
            raise ValueError(f"memory limit must look like '512m', got {value!r}") from e
        if size <= 0:
            raise ValueError(f"memory limit must be positive, got {value!r}")
        return value

    @field_validator("cpus")
    @classmethod
    def _check_cpus(cls, value: str) -> str:
        value = value.strip()
        try:
            cpus = float(value)
        except ValueError as e:
            raise ValueError(f"cpu limit must be a number, got {value!r}") from e
        if not math.isfinite(cpus) or cpus < MIN_CPUS:
            raise ValueError(f"cpu limit must be a finite number of at least {MIN_CPUS}, got {value!r}")
        return value

    @property
    def nano_cpus(self) -> int:
        return int(float(self.cpus) * 1e9)


def _check_run_id(value: str) -> str:
    if not _RUN_ID_RE.match(value):
        raise ValueError(f"run id may only contain letters, digits, '_', '.' and '-', got {value!r}")
    return value


class RunRequest(BaseModel):
    """One execution request. Lives only for the duration of the call."""

    run_id: str = Field(default_factory=lambda: uuid4().hex)
    code: str
    requirements: list[str] = Field(default_factory=list)
    limits: ResourceLimits = Field(default_factory=ResourceLimits)
    timeout: float | None = None

    @field_validator("run_id")
    @classmethod
    def _validate_run_id(cls, value: str) -> str:
        return _check_run_id(value)


class HubRunRequest(BaseModel):
    """A run of an externally published image."""

    image: str
    command: list[str] | None = None
    run_id: str = "default"
    limits: ResourceLimits = Field(default_factory=ResourceLimits)
    timeout: float | None = None

    @field_validator("run_id")
    @classmethod
    def _validate_run_id(cls, value: str) -> str:
        return _check_run_id(value)

    @field_validator("image")
    @classmethod
    def _check_image(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("image reference is required")
        return value

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Any:
        # Accepts the textual form callers send ("30", "2.5", "").
        if isinstance(value, str):
            value = value.strip()
            return float(value) if value else None
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value


class ExecutionResult(BaseModel):
    """Represents the result of a code execution within the sandbox.

    Attributes:
        stdout: Standard output captured from the execution.
        stderr: Standard error captured from the execution.
        exit_code: The exit code of the process (0 for success).
        execution_duration: The duration of the execution in seconds.
        strategy: Name of the isolation strategy that produced the result.
    """

    stdout: str
    stderr: str
    exit_code: int
    execution_duration: float = 0.0
    strategy: str = ""


class Outcome(str, Enum):
    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    FAILURE = "failure"


class ClassifiedResult(BaseModel):
    """An execution result together with its outcome and rendered body."""

    outcome: Outcome
    body: str
    result: ExecutionResult

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILURE
