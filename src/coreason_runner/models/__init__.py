# src/coreason_runner/models/__init__.py

"""
Data models for runs, results and host specs.
"""

from .execution import (
    ClassifiedResult,
    ExecutionResult,
    HubRunRequest,
    Outcome,
    ResourceLimits,
    RunRequest,
    build_model,
    parse_requirements,
)
from .system import SystemSpecs

__all__ = [
    "ClassifiedResult",
    "ExecutionResult",
    "HubRunRequest",
    "Outcome",
    "ResourceLimits",
    "RunRequest",
    "SystemSpecs",
    "build_model",
    "parse_requirements",
]
