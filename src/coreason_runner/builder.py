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
import json
from pathlib import Path

from docker import DockerClient
from docker.errors import BuildError, DockerException
from loguru import logger

from coreason_runner.exceptions import ResourceSetupError

SCRIPT_NAME = "script.py"


def render_dockerfile(requirements: list[str], base_image: str = "python:3.12-slim") -> str:
    """Build the Dockerfile for a single script run.

    The install layer is only emitted when there is something to install.
    Exec-form instructions keep requirement strings away from a shell.
    """
    lines = [
        f"FROM {base_image}",
        "WORKDIR /app",
        f"COPY {SCRIPT_NAME} /app/",
    ]
    if requirements:
        lines.append("RUN " + json.dumps(["pip", "install", "--no-cache-dir", *requirements]))
    lines.append("CMD " + json.dumps(["python", SCRIPT_NAME]))
    return "\n".join(lines) + "\n"


def _format_build_log(error: BuildError) -> str:
    chunks = []
    for entry in error.build_log or []:
        if isinstance(entry, dict):
            chunks.append(entry.get("stream") or entry.get("error") or "")
    log = "".join(chunks).strip()
    return log or str(error.msg)


class ImageBuilder:
    """Builds a disposable image from a prepared build context."""

    def __init__(self, client: DockerClient):
        self.client = client

    def _build(self, context_dir: Path, tag: str) -> None:
        self.client.images.build(
            path=str(context_dir),
            tag=tag,
            nocache=True,
            rm=True,
            forcerm=True,
        )

    async def build(self, context_dir: Path, tag: str) -> str:
        """Build the image in ``context_dir`` and tag it.

        Layer caching is disabled so a dependency list is never served stale.

        Raises:
            ResourceSetupError: If the build failed. Nothing is tagged then.
        """
        logger.info(f"Building image {tag}")
        try:
            await asyncio.to_thread(self._build, context_dir, tag)
        except BuildError as e:
            logger.error(f"Docker build failed for {tag}: {e.msg}")
            raise ResourceSetupError(f"Docker build failed:\n{_format_build_log(e)}") from e
        except DockerException as e:
            logger.error(f"Docker build failed for {tag}: {e}")
            raise ResourceSetupError(f"Docker build failed:\n{e}") from e
        return tag
