# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from coreason_runner.config import RunnerConfig
from coreason_runner.registry import RunRegistry
from coreason_runner.runtime import ExecutionStrategy
from coreason_runner.runtimes.docker import DockerRuntime
from coreason_runner.runtimes.venv import VenvRuntime
from coreason_runner.supervisor import ContainerSupervisor


class RunnerFactory:
    """
    Factory to create ExecutionStrategy instances based on configuration.
    """

    @staticmethod
    def get_runtime(
        name: str,
        config: RunnerConfig,
        supervisor: ContainerSupervisor | None = None,
        run_registry: RunRegistry | None = None,
    ) -> ExecutionStrategy:
        """
        Returns an instance of the named ExecutionStrategy.
        """
        if name == "docker":
            return DockerRuntime(config=config, supervisor=supervisor, run_registry=run_registry)
        elif name == "venv":
            return VenvRuntime(config=config)
        raise ValueError(f"Unknown runtime: {name}")

    @staticmethod
    def get_strategies(
        config: RunnerConfig,
        supervisor: ContainerSupervisor | None = None,
        run_registry: RunRegistry | None = None,
    ) -> list[ExecutionStrategy]:
        """
        Returns the configured strategies in fallback order.
        """
        return [RunnerFactory.get_runtime(name, config, supervisor, run_registry) for name in config.strategies]
