from pathlib import Path
from typing import Any, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from coreason_runner.config import RunnerConfig
from coreason_runner.models import ExecutionResult, RunRequest
from coreason_runner.registry import registry
from coreason_runner.runtime import ExecutionStrategy


class FakeStrategy(ExecutionStrategy):
    """Strategy double that records runs and replays a fixed outcome."""

    def __init__(
        self,
        name: str = "docker",
        label: str = "Container",
        result: ExecutionResult | None = None,
        error: BaseException | None = None,
        stderr_is_failure: bool = False,
    ):
        self.name = name
        self.label = label
        self.stderr_is_failure = stderr_is_failure
        self.result = result or ExecutionResult(stdout="hello\n", stderr="", exit_code=0)
        self.error = error
        self.runs: list[RunRequest] = []

    async def execute(self, run: RunRequest) -> ExecutionResult:
        self.runs.append(run)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def clean_registry() -> Generator[None, None, None]:
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def config(tmp_path: Path) -> RunnerConfig:
    return RunnerConfig(
        workspace_root=tmp_path,
        execution_timeout=5.0,
        stop_grace_period=1.0,
        enable_audit_logging=False,
    )


@pytest.fixture
def mock_docker_client() -> Any:
    with patch("coreason_runner.supervisor.docker.from_env") as mock:
        yield mock


@pytest.fixture
def mock_supervisor() -> Any:
    supervisor = MagicMock()
    supervisor.run = AsyncMock(return_value=ExecutionResult(stdout="hello\n", stderr="", exit_code=0))
    supervisor.remove_image = AsyncMock()
    supervisor.pull = AsyncMock()
    supervisor.stop_matching = AsyncMock(return_value=[])
    return supervisor


@pytest.fixture
def fake_strategy() -> FakeStrategy:
    return FakeStrategy()
