import asyncio
import time
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from coreason_runner.exceptions import (
    ContainerControlError,
    ExecutionError,
    ExecutionTimeoutError,
    ResourceSetupError,
)
from coreason_runner.models import ResourceLimits
from coreason_runner.supervisor import ContainerSupervisor
from docker.errors import APIError, DockerException, NotFound


def _container(exit_code: int = 0, stdout: bytes = b"hello\n", stderr: bytes = b"") -> Any:
    container = MagicMock()
    container.name = "runner-abc"
    container.short_id = "abc123"
    container.wait.return_value = {"StatusCode": exit_code}
    container.logs.side_effect = lambda **kwargs: stdout if kwargs["stdout"] else stderr
    return container


@pytest.fixture
def client() -> Any:
    return MagicMock()


@pytest.fixture
def supervisor(client: Any) -> ContainerSupervisor:
    return ContainerSupervisor(client=client, grace_period=2.0)


@pytest.mark.asyncio
async def test_run_applies_limits_and_collects_output(client: Any, supervisor: ContainerSupervisor) -> None:
    container = _container(stdout=b"hello\n", stderr=b"warn")
    client.containers.run.return_value = container

    result = await supervisor.run("python-runner-abc", "runner-abc", ResourceLimits())

    assert result.stdout == "hello\n"
    assert result.stderr == "warn"
    assert result.exit_code == 0

    args, kwargs = client.containers.run.call_args
    assert args == ("python-runner-abc", None)
    assert kwargs["name"] == "runner-abc"
    assert kwargs["detach"] is True
    assert kwargs["mem_limit"] == "512m"
    assert kwargs["nano_cpus"] == 1_000_000_000
    assert kwargs["network_mode"] == "none"
    assert kwargs["security_opt"] == ["no-new-privileges"]

    container.remove.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_run_with_network_and_command(client: Any, supervisor: ContainerSupervisor) -> None:
    client.containers.run.return_value = _container()
    limits = ResourceLimits(memory="1g", cpus="2", network_disabled=False)

    await supervisor.run("alpine", "hub-runner-x", limits, command=["echo", "hi"])

    args, kwargs = client.containers.run.call_args
    assert args == ("alpine", ["echo", "hi"])
    assert "network_mode" not in kwargs
    assert kwargs["mem_limit"] == "1g"
    assert kwargs["nano_cpus"] == 2_000_000_000


@pytest.mark.asyncio
async def test_run_non_zero_exit_is_returned(client: Any, supervisor: ContainerSupervisor) -> None:
    client.containers.run.return_value = _container(exit_code=1, stdout=b"", stderr=b"Traceback")

    result = await supervisor.run("img", "runner-abc", ResourceLimits())

    assert result.exit_code == 1
    assert result.stderr == "Traceback"


@pytest.mark.asyncio
async def test_run_start_failure(client: Any, supervisor: ContainerSupervisor) -> None:
    client.containers.run.side_effect = APIError("conflict")

    with pytest.raises(ResourceSetupError, match="Docker run failed"):
        await supervisor.run("img", "runner-abc", ResourceLimits())


@pytest.mark.asyncio
async def test_run_timeout_stops_and_removes(client: Any, supervisor: ContainerSupervisor) -> None:
    container = _container(stdout=b"partial", stderr=b"")

    def slow_wait() -> dict[str, int]:
        time.sleep(1.0)
        return {"StatusCode": 0}

    container.wait.side_effect = slow_wait
    client.containers.run.return_value = container

    with pytest.raises(ExecutionTimeoutError, match="exceeded 0.1 seconds") as exc_info:
        await supervisor.run("img", "runner-abc", ResourceLimits(), timeout=0.1)

    container.stop.assert_called_once_with(timeout=2)
    container.remove.assert_called_once_with(force=True)
    assert exc_info.value.result is not None
    assert exc_info.value.result.stdout == "partial"
    assert exc_info.value.result.exit_code == -1


@pytest.mark.asyncio
async def test_run_daemon_failure_still_removes(client: Any, supervisor: ContainerSupervisor) -> None:
    container = _container()
    container.wait.side_effect = APIError("daemon gone")
    client.containers.run.return_value = container

    with pytest.raises(ExecutionError, match="Container execution failed"):
        await supervisor.run("img", "runner-abc", ResourceLimits())

    container.remove.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_container_removal_failure_is_reported(client: Any, supervisor: ContainerSupervisor) -> None:
    container = _container()
    container.remove.side_effect = APIError("busy")
    client.containers.run.return_value = container

    with patch("coreason_runner.supervisor.report_cleanup_failure") as report:
        result = await supervisor.run("img", "runner-abc", ResourceLimits())

    assert result.exit_code == 0
    report.assert_called_once()
    assert report.call_args[0][:2] == ("container", "runner-abc")


@pytest.mark.asyncio
async def test_container_already_gone_is_not_reported(client: Any, supervisor: ContainerSupervisor) -> None:
    container = _container()
    container.remove.side_effect = NotFound("gone")
    client.containers.run.return_value = container

    with patch("coreason_runner.supervisor.report_cleanup_failure") as report:
        await supervisor.run("img", "runner-abc", ResourceLimits())

    report.assert_not_called()


@pytest.mark.asyncio
async def test_remove_image(client: Any, supervisor: ContainerSupervisor) -> None:
    await supervisor.remove_image("python-runner-abc")
    client.images.remove.assert_called_once_with("python-runner-abc", force=True)


@pytest.mark.asyncio
async def test_remove_image_failure_never_raises(client: Any, supervisor: ContainerSupervisor) -> None:
    client.images.remove.side_effect = APIError("in use")

    with patch("coreason_runner.supervisor.report_cleanup_failure") as report:
        await supervisor.remove_image("python-runner-abc")

    assert report.call_args[0][:2] == ("image", "python-runner-abc")


@pytest.mark.asyncio
async def test_pull(client: Any, supervisor: ContainerSupervisor) -> None:
    await supervisor.pull("alpine:3")
    client.images.pull.assert_called_once_with("alpine:3")


@pytest.mark.asyncio
async def test_pull_failure(client: Any, supervisor: ContainerSupervisor) -> None:
    client.images.pull.side_effect = NotFound("no such image")

    with pytest.raises(ResourceSetupError) as exc_info:
        await supervisor.pull("nope/nope")
    assert str(exc_info.value).startswith("Failed to pull image:\n")


@pytest.mark.asyncio
async def test_stop_matching_uses_exact_name(client: Any, supervisor: ContainerSupervisor) -> None:
    running = _container()
    running.name = "hub-runner-default"
    client.containers.list.return_value = [running]

    stopped = await supervisor.stop_matching("hub-runner-default")

    assert stopped == ["hub-runner-default"]
    client.containers.list.assert_called_once_with(filters={"name": "^/?hub\\-runner\\-default$"})
    running.stop.assert_called_once_with(timeout=2)


@pytest.mark.asyncio
async def test_stop_matching_nothing_running(client: Any, supervisor: ContainerSupervisor) -> None:
    client.containers.list.return_value = []
    assert await supervisor.stop_matching("hub-runner-default") == []


@pytest.mark.asyncio
async def test_stop_matching_failure(client: Any, supervisor: ContainerSupervisor) -> None:
    running = _container()
    running.stop.side_effect = APIError("refused")
    client.containers.list.return_value = [running]

    with pytest.raises(ContainerControlError, match="Failed to stop container runner-abc"):
        await supervisor.stop_matching("runner-abc")


@pytest.mark.asyncio
async def test_stop_matching_list_failure(client: Any, supervisor: ContainerSupervisor) -> None:
    client.containers.list.side_effect = APIError("down")

    with pytest.raises(ContainerControlError, match="Failed to list containers"):
        await supervisor.stop_matching("runner-abc")


def test_client_created_lazily(mock_docker_client: Any) -> None:
    supervisor = ContainerSupervisor()
    mock_docker_client.assert_not_called()

    assert supervisor.client is mock_docker_client.return_value
    assert supervisor.client is mock_docker_client.return_value
    mock_docker_client.assert_called_once()

    supervisor.close()
    mock_docker_client.return_value.close.assert_called_once()


def test_docker_unavailable(mock_docker_client: Any) -> None:
    mock_docker_client.side_effect = DockerException("no socket")

    with pytest.raises(ResourceSetupError, match="Docker is not available"):
        _ = ContainerSupervisor().client


@pytest.mark.asyncio
async def test_concurrent_runs_are_independent(client: Any, supervisor: ContainerSupervisor) -> None:
    first, second = _container(stdout=b"one"), _container(stdout=b"two")
    client.containers.run.side_effect = [first, second]

    results = await asyncio.gather(
        supervisor.run("img", "runner-a", ResourceLimits()),
        supervisor.run("img", "runner-b", ResourceLimits()),
    )

    assert sorted(r.stdout for r in results) == ["one", "two"]
    first.remove.assert_called_once()
    second.remove.assert_called_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("grace,expected", [(0.5, 1), (0.0, 1), (2.5, 3), (10.0, 10)])
async def test_stop_rounds_grace_period_up(client: Any, grace: float, expected: int) -> None:
    running = _container()
    client.containers.list.return_value = [running]

    await ContainerSupervisor(client=client, grace_period=grace).stop_matching("runner-abc")

    running.stop.assert_called_once_with(timeout=expected)
