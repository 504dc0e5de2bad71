"""
RunResult schema - the outcome of one run.

A RunResult is returned from ShellCommandRunner.run() and the same object is
passed to every notifier call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RunStatus(str, Enum):
    """Final status of a run."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class RunResult:
    """
    The result record of a run.

    Attributes:
        status: success or failure
        error: Message of the first error encountered (None on success)
        capture: Capture key -> bytes written by capture:// outputs
        custom_data: Copied verbatim from the ShellCommand
        exception: The exception behind `error`, kept in memory only
    """
    status: RunStatus
    error: Optional[str] = None
    capture: dict[str, bytes] = field(default_factory=dict)
    custom_data: Any = None
    exception: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.status == RunStatus.SUCCESS and self.error is not None:
            raise ValueError("Successful results must not carry an error")
        if self.status == RunStatus.FAILURE and self.error is None:
            raise ValueError("Failed results must carry an error")

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the wire record sent to notification endpoints.

        Captured bytes are decoded as UTF-8 text; undecodable sequences are
        replaced with U+FFFD.
        """
        return {
            "status": self.status.value,
            "error": self.error,
            "capture": {
                key: value.decode("utf-8", errors="replace")
                for key, value in self.capture.items()
            },
            "customData": self.custom_data,
        }
