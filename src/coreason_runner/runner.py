# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import anyio
from loguru import logger

from coreason_runner.audit import AuditLogger
from coreason_runner.classifier import classify
from coreason_runner.config import RunnerConfig
from coreason_runner.exceptions import ExecutionError, ResourceSetupError
from coreason_runner.factory import RunnerFactory
from coreason_runner.guard import check_code
from coreason_runner.hub import HubImageRunner
from coreason_runner.models import (
    ClassifiedResult,
    Outcome,
    ResourceLimits,
    RunRequest,
    SystemSpecs,
    build_model,
    parse_requirements,
)
from coreason_runner.registry import RunRegistry, registry
from coreason_runner.runtime import ExecutionStrategy
from coreason_runner.supervisor import ContainerSupervisor
from coreason_runner.system import get_system_specs


class RunnerAsync:
    """Async-native runner service (The Core).

    Validates input, picks an isolation strategy, executes and classifies.
    Every call is independent; nothing survives it except pulled hub images.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        supervisor: ContainerSupervisor | None = None,
        strategies: list[ExecutionStrategy] | None = None,
        run_registry: RunRegistry | None = None,
    ):
        """Initializes the RunnerAsync service.

        Args:
            config: Configuration for the runner.
            supervisor: Shared container supervisor (and Docker client).
            strategies: Isolation strategies in fallback order. Built from
                ``config.strategies`` when omitted.
            run_registry: Registry of active runs. Defaults to the process-wide one.
        """
        self.config = config or RunnerConfig()
        self.registry = run_registry or registry
        self.supervisor = supervisor or ContainerSupervisor(grace_period=self.config.stop_grace_period)
        self.strategies = strategies or RunnerFactory.get_strategies(self.config, self.supervisor, self.registry)
        self.hub = HubImageRunner(self.config, self.supervisor, self.registry)
        self.audit = AuditLogger(enabled=self.config.enable_audit_logging)

    async def __aenter__(self) -> "RunnerAsync":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Releases the Docker client, if one was opened."""
        self.supervisor.close()

    def build_run(self, code: str, requirements: str | list[str] | None = None, run_id: str | None = None) -> RunRequest:
        """Validate a code submission and turn it into a RunRequest.

        Raises:
            ValidationError: If the code or dependency list is rejected.
        """
        check_code(code, self.config.max_code_bytes, self.config.denylist)

        limits = build_model(
            ResourceLimits,
            memory=self.config.memory_limit,
            cpus=self.config.cpu_limit,
            network_disabled=self.config.network_disabled,
        )
        fields: dict[str, object] = {
            "code": code,
            "requirements": parse_requirements(requirements),
            "limits": limits,
            "timeout": self.config.execution_timeout,
        }
        if run_id is not None:
            fields["run_id"] = run_id
        return build_model(RunRequest, **fields)

    async def execute(
        self,
        code: str,
        requirements: str | list[str] | None = None,
        run_id: str | None = None,
    ) -> ClassifiedResult:
        """Executes code and returns the classified result.

        Strategies are tried in order; only a setup failure moves on to the
        next one. A failing script is a result, not a reason to retry.

        Args:
            code: The source code to execute.
            requirements: Comma-separated (or listed) dependencies.
            run_id: Optional caller-chosen run identifier.

        Returns:
            ClassifiedResult: Outcome, rendered body and raw result.

        Raises:
            ValidationError: If the input is rejected.
            ResourceSetupError: If no strategy could set up a sandbox.
            ExecutionTimeoutError: If the run exceeded its deadline.
        """
        run = self.build_run(code, requirements, run_id)
        logger.info(f"Executing run {run.run_id} ({len(run.requirements)} requirements)")

        failures: list[tuple[ExecutionStrategy, ResourceSetupError]] = []
        for strategy in self.strategies:
            await self.audit.log_pre_execution(run.code, strategy.name, run.run_id)
            try:
                result = await strategy.execute(run)
            except ResourceSetupError as e:
                logger.warning(f"Strategy {strategy.name} failed for run {run.run_id}: {e}")
                failures.append((strategy, e))
                continue

            classified = classify(result, strategy.label, strategy.stderr_is_failure)
            if len(self.strategies) > 1:
                classified.body = f"[{strategy.label} Execution]\n{classified.body}"
            return classified

        if len(failures) == 1:
            raise failures[0][1]
        summary = "\n".join(f"[{strategy.name}] {error}" for strategy, error in failures)
        raise ResourceSetupError(f"All isolation strategies failed:\n{summary}")

    async def run_code(
        self,
        code: str,
        requirements: str | list[str] | None = None,
        run_id: str | None = None,
    ) -> str:
        """Executes code and returns the rendered output.

        Raises:
            ExecutionError: If the run was classified as a failure.
        """
        classified = await self.execute(code, requirements, run_id)
        if classified.outcome is Outcome.FAILURE:
            raise ExecutionError(classified.body, classified.result)
        return classified.body

    async def run_docker_image(
        self,
        image: str,
        command: list[str] | None = None,
        memory_limit: str | None = None,
        cpu_limit: str | None = None,
        run_id: str | None = None,
        timeout: str | float | None = None,
        network_disabled: bool | None = None,
    ) -> str:
        """Pulls and runs a published image, returning the rendered output.

        Args:
            image: Image reference, e.g. "alpine:3.19".
            command: Command and arguments overriding the image's default.
            memory_limit: Memory ceiling (default from config, "512m").
            cpu_limit: CPU ceiling (default from config, "1").
            run_id: Identifier used to name and later stop the container.
            timeout: Deadline in seconds, as text or number.
            network_disabled: Override the configured network policy.

        Raises:
            ValidationError: If an argument is malformed.
            ResourceSetupError: If the pull or start failed.
            ExecutionError: If the container exited non-zero.
        """
        request = self.hub.build_request(image, command, memory_limit, cpu_limit, run_id, timeout, network_disabled)
        result = await self.hub.run(request)

        classified = classify(result, "Container")
        if classified.outcome is Outcome.FAILURE:
            raise ExecutionError(classified.body, result)
        return classified.body

    async def stop_containers(self, run_id: str | None = None) -> str:
        """Stops the running container of a run.

        The container is found through the run registry; unknown ids fall
        back to the hub naming convention. Without an id the default hub run
        is targeted.

        Raises:
            ContainerControlError: If a container could not be stopped.
        """
        run_id = run_id or self.config.hub_default_id
        name = self.registry.container_name(run_id) or self.hub.container_name(run_id)

        stopped = await self.supervisor.stop_matching(name)
        if not stopped:
            return "No running containers found."
        return f"Container(s) stopped successfully: {', '.join(stopped)}"

    async def get_system_specs(self) -> SystemSpecs:
        return await anyio.to_thread.run_sync(get_system_specs, self.supervisor, self.config.python_executable)


class Runner:
    """Sync Facade for RunnerAsync (The Facade).

    Wraps RunnerAsync and executes methods via anyio.run.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        supervisor: ContainerSupervisor | None = None,
        strategies: list[ExecutionStrategy] | None = None,
    ):
        self._async = RunnerAsync(config, supervisor, strategies)

    def __enter__(self) -> "Runner":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        anyio.run(self._async.__aexit__, exc_type, exc_val, exc_tb)

    def execute(
        self, code: str, requirements: str | list[str] | None = None, run_id: str | None = None
    ) -> ClassifiedResult:
        return anyio.run(self._async.execute, code, requirements, run_id)

    def run_code(self, code: str, requirements: str | list[str] | None = None, run_id: str | None = None) -> str:
        """Executes code synchronously. See RunnerAsync.run_code."""
        return anyio.run(self._async.run_code, code, requirements, run_id)

    def run_docker_image(
        self,
        image: str,
        command: list[str] | None = None,
        memory_limit: str | None = None,
        cpu_limit: str | None = None,
        run_id: str | None = None,
        timeout: str | float | None = None,
        network_disabled: bool | None = None,
    ) -> str:
        """Runs a published image synchronously. See RunnerAsync.run_docker_image."""
        return anyio.run(
            self._async.run_docker_image, image, command, memory_limit, cpu_limit, run_id, timeout, network_disabled
        )

    def stop_containers(self, run_id: str | None = None) -> str:
        return anyio.run(self._async.stop_containers, run_id)

    def get_system_specs(self) -> SystemSpecs:
        return anyio.run(self._async.get_system_specs)
