from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from coreason_runner import main
from coreason_runner.exceptions import ExecutionError, ResourceSetupError, ValidationError
from coreason_runner.models import SystemSpecs


@pytest.fixture
def mock_runner() -> Any:
    with patch("coreason_runner.main.runner") as mock:
        mock.run_code = AsyncMock(return_value="hello")
        mock.run_docker_image = AsyncMock(return_value="hi")
        mock.stop_containers = AsyncMock(return_value="No running containers found.")
        mock.get_system_specs = AsyncMock(
            return_value=SystemSpecs(os="linux", cpu="2 cores (x86_64)", ram="4.0 GB", docker=True, python="Python 3.12.1")
        )
        yield mock


@pytest.mark.asyncio
async def test_run_code_tool(mock_runner: Any) -> None:
    assert await main.run_code("print('hello')", "requests") == "hello"
    mock_runner.run_code.assert_awaited_once_with("print('hello')", "requests")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ValidationError("Code is too large! (20000 bytes, limit is 10000)"),
        ResourceSetupError("Docker build failed:\nboom"),
        ExecutionError("Container execution failed:\nOutput:\n\nErrors:\nboom"),
    ],
)
async def test_run_code_tool_reports_errors_as_text(mock_runner: Any, error: Exception) -> None:
    mock_runner.run_code.side_effect = error

    assert await main.run_code("x") == f"Error executing code: {error}"


@pytest.mark.asyncio
async def test_run_docker_image_tool(mock_runner: Any) -> None:
    result = await main.run_docker_image("alpine", command=["echo", "hi"], id="job1", timeout="5")

    assert result == "hi"
    mock_runner.run_docker_image.assert_awaited_once_with(
        "alpine", command=["echo", "hi"], memory_limit="512m", cpu_limit="1", run_id="job1", timeout="5"
    )


@pytest.mark.asyncio
async def test_run_docker_image_tool_error(mock_runner: Any) -> None:
    mock_runner.run_docker_image.side_effect = ResourceSetupError("Failed to pull image:\nnot found")

    assert await main.run_docker_image("nope") == "Error running image: Failed to pull image:\nnot found"


@pytest.mark.asyncio
async def test_stop_containers_tool(mock_runner: Any) -> None:
    assert await main.stop_containers() == "No running containers found."
    mock_runner.stop_containers.assert_awaited_once_with("default")

    mock_runner.stop_containers.side_effect = RuntimeError("daemon down")
    assert await main.stop_containers("job1") == "Error stopping containers: daemon down"


@pytest.mark.asyncio
async def test_get_system_specs_tool(mock_runner: Any) -> None:
    specs = await main.get_system_specs()

    assert specs["os"] == "linux"
    assert specs["docker"] is True
    assert specs["gpu"] is None


def test_main_runs_server() -> None:
    with patch.object(main.mcp, "run") as run:
        main.main()
    run.assert_called_once()
