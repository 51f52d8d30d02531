# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from pydantic import BaseModel


class SystemSpecs(BaseModel):
    """Host capabilities as reported to the caller."""

    os: str
    cpu: str
    ram: str
    gpu: str | None = None
    gpu_vram: str | None = None
    docker: bool
    python: str | None = None
    node: str | None = None
    rust: str | None = None
