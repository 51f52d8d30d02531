# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import shutil
import tempfile
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import anyio
from loguru import logger

from coreason_runner.cleanup import report_cleanup_failure
from coreason_runner.exceptions import ResourceSetupError


class Workspace:
    """Scratch directory owned by exactly one run.

    The directory name embeds the run id so concurrent runs never share one.
    It is removed when the ``async with`` block exits, whatever the outcome.
    """

    def __init__(self, run_id: str, root: Path | None = None):
        """Initializes the Workspace.

        Args:
            run_id: Identifier of the owning run.
            root: Parent directory. Defaults to the system temp directory.
        """
        self.run_id = run_id
        self.root = root
        self.path: Path | None = None

    async def __aenter__(self) -> "Workspace":
        self.path = await anyio.to_thread.run_sync(self._create)
        logger.debug(f"Workspace created: {self.path}")
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.remove()

    def _create(self) -> Path:
        try:
            return Path(tempfile.mkdtemp(prefix=f"coreason-run-{self.run_id}-", dir=self.root))
        except OSError as e:
            raise ResourceSetupError(f"Failed to create temp directory: {e}") from e

    async def write_text(self, name: str, content: str) -> Path:
        """Write a file inside the workspace and return its path."""
        if self.path is None:
            raise RuntimeError("Workspace not created")

        target = self.path / name
        try:
            async with aiofiles.open(target, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise ResourceSetupError(f"Failed to write {name}: {e}") from e
        return target

    async def remove(self) -> None:
        """Delete the workspace tree. Failures go to the cleanup channel."""
        if self.path is None:
            return

        path, self.path = self.path, None
        try:
            await anyio.to_thread.run_sync(shutil.rmtree, path)
            logger.debug(f"Workspace removed: {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            report_cleanup_failure("workspace", str(path), e)
