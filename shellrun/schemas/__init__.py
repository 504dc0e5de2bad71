"""
shellrun.schemas - Data structures for a shellrun execution.

ShellCommand -> ShellCommandRunner.run() -> RunResult

1. ShellCommand: declarative inputs, outputs, commands, notifications, custom data
2. RunResult: the record returned from a run and handed to every notifier
"""

from .shell_command import ShellCommand, SERIALIZATION_FIELDS
from .run_result import RunResult, RunStatus

__all__ = [
    "ShellCommand",
    "SERIALIZATION_FIELDS",
    "RunResult",
    "RunStatus",
]
