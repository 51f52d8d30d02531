# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import os
import time
from pathlib import Path

from loguru import logger

from coreason_runner.config import RunnerConfig
from coreason_runner.exceptions import ExecutionTimeoutError, ResourceSetupError
from coreason_runner.models import ExecutionResult, RunRequest
from coreason_runner.process import ProcessOutput, run_process
from coreason_runner.runtime import ExecutionStrategy
from coreason_runner.workspace import Workspace


class VenvRuntime(ExecutionStrategy):
    """Virtual-environment implementation of the ExecutionStrategy.

    Builds a throwaway environment inside the run's workspace, installs the
    dependencies in one batch, runs the script with the environment's
    interpreter and deletes everything afterwards.

    Only the execution deadline is enforced here; memory, CPU and network
    limits need the container strategy.
    """

    name = "venv"
    label = "Venv"
    stderr_is_failure = True

    def __init__(self, config: RunnerConfig | None = None):
        self.config = config or RunnerConfig()

    @staticmethod
    def env_python(env_dir: Path) -> Path:
        if os.name == "nt":
            return env_dir / "Scripts" / "python.exe"
        return env_dir / "bin" / "python"

    async def _setup_step(self, cmd: list[str], what: str, timeout: float | None) -> ProcessOutput:
        try:
            output = await run_process(cmd, timeout=timeout, grace_period=self.config.stop_grace_period)
        except (OSError, TimeoutError) as e:
            logger.error(f"Failed to {what}: {e}")
            raise ResourceSetupError(f"Failed to {what}: {e}") from e

        if output.exit_code != 0:
            logger.error(f"Failed to {what}: exit code {output.exit_code}")
            raise ResourceSetupError(f"Failed to {what}: {output.stderr_text()}")
        return output

    async def create_environment(self, env_dir: Path) -> Path:
        """Create the environment and return its interpreter path."""
        logger.info(f"Creating virtual environment at {env_dir}")
        await self._setup_step(
            [self.config.python_executable, "-m", "venv", str(env_dir)],
            "create virtual environment",
            self.config.install_timeout,
        )
        return self.env_python(env_dir)

    async def install_requirements(self, python: Path, requirements: list[str]) -> None:
        logger.info(f"Installing requirements: {', '.join(requirements)}")
        await self._setup_step(
            [str(python), "-m", "pip", "install", *requirements],
            "install requirements",
            self.config.install_timeout,
        )

    async def execute(self, run: RunRequest) -> ExecutionResult:
        """
        Create, populate, use and tear down an environment for ``run``.
        """
        async with Workspace(run.run_id, self.config.workspace_root) as workspace:
            assert workspace.path is not None
            python = await self.create_environment(workspace.path / f"venv_{run.run_id}")

            if run.requirements:
                await self.install_requirements(python, run.requirements)

            script = await workspace.write_text("script.py", run.code)

            logger.info(f"Executing run {run.run_id} in virtual environment")
            start_time = time.time()
            try:
                output = await run_process(
                    [str(python), str(script)],
                    timeout=run.timeout,
                    grace_period=self.config.stop_grace_period,
                    cwd=workspace.path,
                )
            except TimeoutError as e:
                raise ExecutionTimeoutError(str(e)) from e
            except OSError as e:
                raise ResourceSetupError(f"Failed to execute Python: {e}") from e
            duration = time.time() - start_time

        return ExecutionResult(
            stdout=output.stdout_text(),
            stderr=output.stderr_text(),
            exit_code=output.exit_code,
            execution_duration=duration,
            strategy=self.name,
        )
