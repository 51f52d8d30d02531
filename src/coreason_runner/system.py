# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Read-only probe of the host's capabilities."""

import os
import platform
import subprocess

from docker.errors import DockerException
from loguru import logger

from coreason_runner.exceptions import ResourceSetupError
from coreason_runner.models import SystemSpecs
from coreason_runner.supervisor import ContainerSupervisor


def get_version(cmd: str) -> str | None:
    """Return the trimmed ``<cmd> --version`` output, or None if unavailable."""
    try:
        proc = subprocess.run([cmd, "--version"], capture_output=True, text=True, timeout=10)
    except (OSError, subprocess.SubprocessError):
        return None
    if proc.returncode != 0:
        return None
    # Older interpreters print their version on stderr
    return (proc.stdout or proc.stderr).strip() or None


def total_ram() -> str:
    try:
        total = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return "Unknown"
    return f"{total / (1024**3):.1f} GB"


def docker_available(supervisor: ContainerSupervisor) -> bool:
    try:
        return bool(supervisor.client.ping())
    except (DockerException, ResourceSetupError) as e:
        logger.debug(f"Docker ping failed: {e}")
        return False


def get_system_specs(supervisor: ContainerSupervisor | None = None, python_executable: str = "python") -> SystemSpecs:
    supervisor = supervisor or ContainerSupervisor()
    return SystemSpecs(
        os=platform.system().lower() or "unknown",
        cpu=f"{os.cpu_count() or 0} cores ({platform.machine() or 'unknown'})",
        ram=total_ram(),
        docker=docker_available(supervisor),
        python=get_version(python_executable),
        node=get_version("node"),
        rust=get_version("rustc"),
    )
