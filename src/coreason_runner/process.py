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
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass
class ProcessOutput:
    exit_code: int
    stdout: bytes
    stderr: bytes

    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


async def run_process(
    cmd: list[str],
    timeout: float | None = None,
    grace_period: float = 10.0,
    cwd: Path | None = None,
) -> ProcessOutput:
    """Run a command to completion and capture both streams.

    When ``timeout`` expires the process gets SIGTERM, then SIGKILL if it is
    still alive after ``grace_period`` seconds.

    Raises:
        FileNotFoundError: If the executable does not exist.
        TimeoutError: If the deadline expired.
    """
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"Process {cmd[0]} exceeded {timeout}s, terminating (pid {proc.pid})")
        await _terminate(proc, grace_period)
        raise TimeoutError(f"Execution exceeded {timeout} seconds limit.") from e

    assert proc.returncode is not None
    return ProcessOutput(exit_code=proc.returncode, stdout=stdout, stderr=stderr)


async def _terminate(proc: asyncio.subprocess.Process, grace_period: float) -> None:
    try:
        proc.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(proc.wait(), timeout=grace_period)
    except asyncio.TimeoutError:
        logger.warning(f"Process {proc.pid} ignored SIGTERM, killing")
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
