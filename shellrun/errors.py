"""
Error classes for shellrun execution.

Every operational failure in a run is one of these types. The runner catches
them at the phase boundary and turns the first one into the failure record:
- ValidationError / ParseError: malformed ShellCommand or JSON
- UnsupportedSchemeError: no handler for a URL scheme
- DownloadError: input could not be fetched
- ExecError: a command exited non-zero
- MissingOutputFileError: a staged output file vanished before delivery
- DuplicateCaptureKeyError: two outputs captured under the same key
- UploadError: HTTP, object storage or filesystem delivery failed

Two errors are raised to the caller of run() instead of being recorded:
- NotifierNotConfiguredError: notifications requested without a notifier
- NotificationError: a notifier failed to deliver
"""

from typing import Optional


class ShellRunError(Exception):
    """Base exception for shellrun."""
    pass


class ValidationError(ShellRunError):
    """A ShellCommand or its serialized form is malformed."""
    pass


class ParseError(ValidationError):
    """Serialized ShellCommand text is not valid JSON."""
    pass


class ConfigError(ShellRunError):
    """Configuration validation error."""
    pass


class UnsupportedSchemeError(ShellRunError):
    """No handler is registered for a URL scheme."""

    def __init__(self, context: str, scheme: str, url: str):
        self.context = context
        self.scheme = scheme
        self.url = url
        super().__init__(f"Invalid {context} scheme '{scheme}' in URL '{url}'.")


class DownloadError(ShellRunError):
    """An input could not be fetched into its temp file."""
    pass


class ExecError(ShellRunError):
    """
    A command exited with a non-zero status.

    Attributes:
        command: The command as executed (placeholders already substituted)
        output: Combined stdout/stderr of the command
        returncode: The exit status
    """

    def __init__(self, command: str, output: str, returncode: int):
        self.command = command
        self.output = output
        self.returncode = returncode
        super().__init__(
            f"Command '{command}' exited with status {returncode}: {output}"
        )


class MissingOutputFileError(ShellRunError):
    """The staged temp file for an output no longer exists."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Could not find file at path '{path}' for upload.")


class DuplicateCaptureKeyError(ShellRunError):
    """A capture key was written twice within one run."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Capture key {key} specified twice.")


class UploadError(ShellRunError):
    """An output could not be delivered to its destination."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        target: Optional[str] = None,
    ):
        self.source = source
        self.target = target
        super().__init__(message)


class NotifierNotConfiguredError(ShellRunError):
    """Notifications were requested but the runner has no notifier."""
    pass


class NotificationError(ShellRunError):
    """A notification endpoint rejected or could not receive the result."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)
