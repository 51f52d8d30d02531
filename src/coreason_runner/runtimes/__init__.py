from .docker import DockerRuntime
from .venv import VenvRuntime

__all__ = ["DockerRuntime", "VenvRuntime"]
