# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from loguru import logger

from coreason_runner.config import RunnerConfig
from coreason_runner.models import ExecutionResult, HubRunRequest, ResourceLimits, build_model
from coreason_runner.registry import RunRegistry, registry
from coreason_runner.supervisor import ContainerSupervisor


class HubImageRunner:
    """Pulls and runs published images under the supervisor's constraints.

    Pulled images are left in place; they are shared, named images rather
    than per-run build artifacts.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        supervisor: ContainerSupervisor | None = None,
        run_registry: RunRegistry | None = None,
    ):
        self.config = config or RunnerConfig()
        self.supervisor = supervisor or ContainerSupervisor(grace_period=self.config.stop_grace_period)
        self.registry = run_registry or registry

    def container_name(self, run_id: str) -> str:
        return f"{self.config.hub_container_prefix}{run_id}"

    def build_request(
        self,
        image: str,
        command: list[str] | None = None,
        memory_limit: str | None = None,
        cpu_limit: str | None = None,
        run_id: str | None = None,
        timeout: str | float | None = None,
        network_disabled: bool | None = None,
    ) -> HubRunRequest:
        """Validate caller input, filling gaps from the configuration.

        Raises:
            ValidationError: If any value is malformed.
        """
        limits = build_model(
            ResourceLimits,
            memory=memory_limit or self.config.memory_limit,
            cpus=cpu_limit or self.config.cpu_limit,
            network_disabled=self.config.network_disabled if network_disabled is None else network_disabled,
        )
        return build_model(
            HubRunRequest,
            image=image,
            command=command or None,
            run_id=run_id or self.config.hub_default_id,
            limits=limits,
            timeout=timeout,
        )

    async def run(self, request: HubRunRequest) -> ExecutionResult:
        """Pull ``request.image`` then run it once.

        Raises:
            ValidationError: If a run with the same id is already active.
            ResourceSetupError: If the pull or the container start failed.
            ExecutionTimeoutError: If the container outlived the timeout.
        """
        name = self.container_name(request.run_id)
        with self.registry.track(request.run_id, name):
            await self.supervisor.pull(request.image)
            result = await self.supervisor.run(
                request.image,
                name,
                request.limits,
                command=request.command,
                timeout=request.timeout,
            )

        logger.info(f"Hub run {request.run_id} ({request.image}) exited with {result.exit_code}")
        return result.model_copy(update={"strategy": "hub"})
