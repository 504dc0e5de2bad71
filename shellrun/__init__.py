"""
shellrun - Declarative shell pipeline runner

Fetches input files, runs shell commands over them, delivers the produced
files (s3, http, capture, file) and notifies listeners with the result.
"""

__version__ = "0.1.0"


__all__ = [
    "ShellCommand",
    "ShellCommandRunner",
    "RunResult",
    "RunStatus",
    "RunnerConfig",
    "load_config",
    "build_runner",
]

from .schemas import ShellCommand, RunResult, RunStatus
from .runner import ShellCommandRunner
from .config import RunnerConfig, load_config, build_runner
