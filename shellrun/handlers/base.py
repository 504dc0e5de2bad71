"""
Base handler classes for URL schemes.

Handlers do the scheme-specific IO of a run:
- InputHandler: fetch a source URL into a local temp file
- OutputHandler: deliver a local temp file to a destination URL
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class RunContext:
    """
    Run-scoped state shared with output handlers.

    Attributes:
        capture: Capture key -> bytes, filled by capture:// outputs
    """
    capture: dict[str, bytes] = field(default_factory=dict)


class InputHandler(ABC):
    """Abstract base class for input scheme handlers."""

    @abstractmethod
    def fetch(self, url: str, destination: Path) -> None:
        """
        Fetch the resource at url into destination.

        Args:
            url: Source URL (already rewritten)
            destination: Existing, empty temp file to fill

        Raises:
            DownloadError: If the resource cannot be fetched
        """
        pass


class OutputHandler(ABC):
    """Abstract base class for output scheme handlers."""

    @abstractmethod
    def deliver(self, source: Path, url: str, context: RunContext) -> None:
        """
        Deliver the file at source to url.

        Args:
            source: Local temp file produced by the commands
            url: Destination URL (already rewritten)
            context: Run-scoped state

        Raises:
            ShellRunError: If delivery fails
        """
        pass
