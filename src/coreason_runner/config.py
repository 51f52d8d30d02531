# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Textual pre-filter only; containment comes from the sandbox itself.
DEFAULT_DENYLIST: tuple[str, ...] = (
    "os.system",
    "os.popen",
    "os.fork",
    "os.exec",
    "os.spawn",
    "os.kill",
    "os.remove",
    "os.unlink",
    "os.rmdir",
    "os.removedirs",
    "subprocess",
    "pty.spawn",
    "shutil.rmtree",
    "rm -rf",
    "mkfs",
    "shutdown",
    "reboot",
    ":(){ :|:& };:",
)

StrategyName = Literal["docker", "venv"]


class RunnerConfig(BaseSettings):
    """
    Configuration for the runner.
    """

    # Tried in order; the next one is used only when setup of the previous fails.
    strategies: list[StrategyName] = ["docker"]
    base_image: str = "python:3.12-slim"

    max_code_bytes: int = 10_000
    denylist: tuple[str, ...] = DEFAULT_DENYLIST

    memory_limit: str = "512m"
    cpu_limit: str = "1"
    network_disabled: bool = True

    execution_timeout: float = 60.0
    install_timeout: float = 300.0
    stop_grace_period: float = 10.0

    python_executable: str = Field(
        default="python",
        validation_alias=AliasChoices("PYTHON_EXECUTABLE", "COREASON_RUNNER_PYTHON_EXECUTABLE", "python_executable"),
    )
    workspace_root: Path | None = None

    image_prefix: str = "python-runner-"
    container_prefix: str = "runner-"
    hub_container_prefix: str = "hub-runner-"
    hub_default_id: str = "default"

    enable_audit_logging: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="COREASON_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("strategies")
    @classmethod
    def _at_least_one_strategy(cls, value: list[StrategyName]) -> list[StrategyName]:
        if not value:
            raise ValueError("At least one isolation strategy must be configured")
        # Keep first occurrence order
        return list(dict.fromkeys(value))

    @field_validator("max_code_bytes")
    @classmethod
    def _positive_ceiling(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_code_bytes must be positive")
        return value
