# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from typing import Any

from mcp.server.fastmcp import FastMCP

from coreason_runner.runner import RunnerAsync
from coreason_runner.utils.logger import logger

# Initialize Runner Logic
runner = RunnerAsync()

# Initialize MCP Server
mcp = FastMCP("coreason-runner")


@mcp.tool()  # type: ignore[misc]
async def run_code(code: str, requirements: str | None = None) -> str:
    """
    Run a Python script in a fresh, network-less container.
    Requirements are a comma-separated list of pip packages.
    """
    try:
        return await runner.run_code(code, requirements)
    except Exception as e:
        logger.warning(f"run_code failed: {e}")
        return f"Error executing code: {e!s}"


@mcp.tool()  # type: ignore[misc]
async def run_docker_image(
    image: str,
    command: list[str] | None = None,
    memory_limit: str = "512m",
    cpu_limit: str = "1",
    id: str = "default",
    timeout: str | None = None,
) -> str:
    """
    Pull a published image and run it once under memory/CPU limits.
    """
    try:
        return await runner.run_docker_image(
            image,
            command=command,
            memory_limit=memory_limit,
            cpu_limit=cpu_limit,
            run_id=id,
            timeout=timeout,
        )
    except Exception as e:
        logger.warning(f"run_docker_image failed: {e}")
        return f"Error running image: {e!s}"


@mcp.tool()  # type: ignore[misc]
async def stop_containers(id: str = "default") -> str:
    """
    Stop the running container of the given run id.
    """
    try:
        return await runner.stop_containers(id)
    except Exception as e:
        logger.warning(f"stop_containers failed: {e}")
        return f"Error stopping containers: {e!s}"


@mcp.tool()  # type: ignore[misc]
async def get_system_specs() -> dict[str, Any]:
    """
    Describe the host: OS, CPU, RAM, Docker availability and tool versions.
    """
    specs = await runner.get_system_specs()
    return specs.model_dump()


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
