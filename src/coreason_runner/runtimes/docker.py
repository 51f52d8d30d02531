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

from coreason_runner.builder import SCRIPT_NAME, ImageBuilder, render_dockerfile
from coreason_runner.config import RunnerConfig
from coreason_runner.models import ExecutionResult, RunRequest
from coreason_runner.registry import RunRegistry, registry
from coreason_runner.runtime import ExecutionStrategy
from coreason_runner.supervisor import ContainerSupervisor
from coreason_runner.workspace import Workspace


class DockerRuntime(ExecutionStrategy):
    """
    Docker-based implementation of the ExecutionStrategy.

    Each run builds its own image from the script and dependency list, runs
    it once under the configured limits, and removes the image afterwards.
    """

    name = "docker"
    label = "Container"

    def __init__(
        self,
        config: RunnerConfig | None = None,
        supervisor: ContainerSupervisor | None = None,
        run_registry: RunRegistry | None = None,
    ):
        self.config = config or RunnerConfig()
        self.supervisor = supervisor or ContainerSupervisor(grace_period=self.config.stop_grace_period)
        self.registry = run_registry or registry

    def image_tag(self, run_id: str) -> str:
        return f"{self.config.image_prefix}{run_id}"

    def container_name(self, run_id: str) -> str:
        return f"{self.config.container_prefix}{run_id}"

    async def execute(self, run: RunRequest) -> ExecutionResult:
        """
        Build, run and discard an image for ``run``.
        """
        tag = self.image_tag(run.run_id)
        name = self.container_name(run.run_id)

        with self.registry.track(run.run_id, name):
            async with Workspace(run.run_id, self.config.workspace_root) as workspace:
                await workspace.write_text(SCRIPT_NAME, run.code)
                await workspace.write_text("Dockerfile", render_dockerfile(run.requirements, self.config.base_image))

                assert workspace.path is not None
                await ImageBuilder(self.supervisor.client).build(workspace.path, tag)

                # The image exists from here on and must not outlive the run.
                try:
                    result = await self.supervisor.run(tag, name, run.limits, timeout=run.timeout)
                finally:
                    await self.supervisor.remove_image(tag)

        logger.info(f"Run {run.run_id} finished in container with exit code {result.exit_code}")
        return result.model_copy(update={"strategy": self.name})
