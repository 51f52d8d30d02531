# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import asyncio
import math
import re
import time
from typing import Any

import docker
from docker import DockerClient
from docker.errors import DockerException, NotFound
from docker.models.containers import Container
from loguru import logger

from coreason_runner.cleanup import report_cleanup_failure
from coreason_runner.exceptions import (
    ContainerControlError,
    ExecutionError,
    ExecutionTimeoutError,
    ResourceSetupError,
)
from coreason_runner.models import ExecutionResult, ResourceLimits


class ContainerSupervisor:
    """
    Runs images under resource constraints and cleans up after them.

    Every container gets a memory ceiling, a CPU ceiling and
    ``no-new-privileges``; network is removed unless the limits allow it.
    Containers are always removed once their output has been collected.
    """

    def __init__(self, client: DockerClient | None = None, grace_period: float = 10.0):
        """Initializes the ContainerSupervisor.

        Args:
            client: Docker client. Created from the environment on first use.
            grace_period: Seconds between SIGTERM and SIGKILL when stopping.
        """
        self._client = client
        self.grace_period = grace_period

    @property
    def client(self) -> DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                logger.error(f"Docker is not available: {e}")
                raise ResourceSetupError(f"Docker is not available: {e}") from e
        return self._client

    def _stop_timeout(self) -> int:
        # docker stop takes whole seconds; 0 would mean an immediate SIGKILL
        return max(1, math.ceil(self.grace_period))

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _start(self, image: str, name: str, limits: ResourceLimits, command: list[str] | None) -> Container:
        kwargs: dict[str, Any] = {
            "name": name,
            "detach": True,
            "mem_limit": limits.memory,
            "nano_cpus": limits.nano_cpus,
            "security_opt": ["no-new-privileges"],
        }
        if limits.network_disabled:
            kwargs["network_mode"] = "none"

        try:
            container: Container = self.client.containers.run(image, command, **kwargs)
        except DockerException as e:
            logger.error(f"Failed to start container {name}: {e}")
            raise ResourceSetupError(f"Docker run failed: {e}") from e
        return container

    async def run(
        self,
        image: str,
        name: str,
        limits: ResourceLimits,
        command: list[str] | None = None,
        timeout: float | None = None,
    ) -> ExecutionResult:
        """Run ``image`` as container ``name`` and capture its output.

        Raises:
            ResourceSetupError: If the container could not be started.
            ExecutionTimeoutError: If the container outlived ``timeout``.
            ExecutionError: If the daemon failed while supervising the run.
        """
        logger.info(
            f"Running {image} as {name} (memory={limits.memory}, cpus={limits.cpus}, "
            f"network={'none' if limits.network_disabled else 'default'})"
        )
        container = await asyncio.to_thread(self._start, image, name, limits, command)

        start_time = time.time()
        try:
            timed_out = False
            try:
                status = await asyncio.wait_for(asyncio.to_thread(container.wait), timeout=timeout)
                exit_code = int(status.get("StatusCode", 1))
            except asyncio.TimeoutError:
                timed_out = True
                logger.warning(f"Container {name} exceeded {timeout}s, stopping")
                await asyncio.to_thread(container.stop, timeout=self._stop_timeout())
                exit_code = -1

            duration = time.time() - start_time

            stdout_bytes = await asyncio.to_thread(container.logs, stdout=True, stderr=False)
            stderr_bytes = await asyncio.to_thread(container.logs, stdout=False, stderr=True)
        except DockerException as e:
            logger.error(f"Supervision of container {name} failed: {e}")
            raise ExecutionError(f"Container execution failed: {e}") from e
        finally:
            await self._remove_container(container, name)

        result = ExecutionResult(
            stdout=stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else "",
            stderr=stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else "",
            exit_code=exit_code,
            execution_duration=duration,
        )
        if timed_out:
            raise ExecutionTimeoutError(f"Execution exceeded {timeout} seconds limit.", result)
        return result

    async def _remove_container(self, container: Container, name: str) -> None:
        try:
            await asyncio.to_thread(container.remove, force=True)
        except NotFound:
            pass
        except DockerException as e:
            report_cleanup_failure("container", name, e)

    async def remove_image(self, tag: str) -> None:
        """Force-remove a build artifact. Failures go to the cleanup channel."""
        try:
            await asyncio.to_thread(self.client.images.remove, tag, force=True)
            logger.debug(f"Removed image {tag}")
        except NotFound:
            pass
        except (DockerException, ResourceSetupError) as e:
            report_cleanup_failure("image", tag, e)

    async def pull(self, image: str) -> None:
        """Pull ``image`` from its registry.

        Raises:
            ResourceSetupError: If the pull failed.
        """
        logger.info(f"Pulling image {image}")
        try:
            await asyncio.to_thread(self.client.images.pull, image)
        except DockerException as e:
            logger.error(f"Failed to pull image {image}: {e}")
            raise ResourceSetupError(f"Failed to pull image:\n{e}") from e

    async def stop_matching(self, name: str) -> list[str]:
        """Stop every running container named exactly ``name``.

        Returns:
            list[str]: Names of the stopped containers, empty if none matched.

        Raises:
            ContainerControlError: On the first container that fails to stop.
        """
        try:
            containers: list[Container] = await asyncio.to_thread(
                self.client.containers.list, filters={"name": f"^/?{re.escape(name)}$"}
            )
        except DockerException as e:
            raise ContainerControlError(f"Failed to list containers: {e}") from e

        stopped: list[str] = []
        for container in containers:
            logger.info(f"Stopping container {container.name} ({container.short_id})")
            try:
                await asyncio.to_thread(container.stop, timeout=self._stop_timeout())
            except DockerException as e:
                raise ContainerControlError(f"Failed to stop container {container.name}:\n{e}") from e
            stopped.append(container.name)
        return stopped
