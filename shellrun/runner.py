"""
ShellCommandRunner - executes one ShellCommand.

Execution flow:
1. Resolve inputs: fetch every input URL into a temp file
2. Prepare outputs: allocate an empty temp file per output
3. Run commands: substitute %%inputs.<name>%% / %%outputs.<name>%% and
   run each command through the shell, in order
4. Deliver outputs: send every output temp file to its destination
5. Cleanup: delete all temp files (always)
6. Build the RunResult
7. Notify every notification URL with the RunResult

Phases 1-4 form a group: each phase returns the error it hit (or None), and
the first error skips the rest of the group. Cleanup and result assembly
always run. Notifier errors are the one thing not recorded in the result;
they propagate to the caller of run().
"""

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from shellrun.errors import ExecError, MissingOutputFileError, NotifierNotConfiguredError
from shellrun.handlers import HandlerRegistry, InputHandler, OutputHandler, RunContext
from shellrun.notifier import Notifier
from shellrun.rewriters import UrlRewriter
from shellrun.schemas import RunResult, RunStatus, ShellCommand
from shellrun.tempfiles import TempFileAllocator, url_extension
from shellrun.uploader import Uploader

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

INPUT_PREFIX = "input-"
OUTPUT_PREFIX = "output-"


def build_replacements(
    inputs: dict[str, Path],
    outputs: dict[str, Path],
) -> dict[str, str]:
    """Build the placeholder token -> local path table for a run."""
    table: dict[str, str] = {}
    for name, path in inputs.items():
        table[f"%%inputs.{name}%%"] = str(path)
    for name, path in outputs.items():
        table[f"%%outputs.{name}%%"] = str(path)
    return table


def make_substituter(table: dict[str, str]) -> Callable[[str], str]:
    """
    Return a function that replaces every token of table in a command.

    Replacement is a single pass: substituted paths are never scanned for
    further tokens. Tokens not in the table are left as they are.
    """
    if not table:
        return lambda command: command

    # Longest first so a token never loses to one of its own prefixes
    tokens = sorted(table, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(t) for t in tokens))
    return lambda command: pattern.sub(lambda m: table[m.group(0)], command)


@dataclass
class _RunState:
    """Run-scoped state, created fresh by every run()."""
    allocator: TempFileAllocator
    context: RunContext = field(default_factory=RunContext)
    inputs: dict[str, Path] = field(default_factory=dict)
    outputs: dict[str, Path] = field(default_factory=dict)


class ShellCommandRunner:
    """
    Execution engine for a ShellCommand.

    Collaborators are passed in explicitly:
    - notifier: called as notifier(url, result) for every notification URL
    - uploader: used for s3:// outputs
    - input_rewriter / output_rewriter: remap URLs before scheme dispatch

    Usage:
        sc = (ShellCommand.create()
              .add_output("echo", "capture://echo")
              .add_command("echo 'HI' > %%outputs.echo%%"))
        result = ShellCommandRunner(sc).run()
        result.capture["echo"]  # b"HI\\n"
    """

    def __init__(
        self,
        shell_command: ShellCommand,
        notifier: Optional[Notifier] = None,
        uploader: Optional[Uploader] = None,
        input_rewriter: Optional[UrlRewriter] = None,
        output_rewriter: Optional[UrlRewriter] = None,
        temp_dir: Optional[Union[str, Path]] = None,
        input_handlers: Optional[HandlerRegistry[InputHandler]] = None,
        output_handlers: Optional[HandlerRegistry[OutputHandler]] = None,
    ):
        """
        Initialize the runner.

        Args:
            shell_command: The ShellCommand to execute
            notifier: Notifier for notification URLs (required if any are set)
            uploader: Uploader for s3:// outputs
            input_rewriter: Applied to every input URL before dispatch
            output_rewriter: Applied to every output URL before dispatch
            temp_dir: Directory for temp files (default <tmp>/shellrun)
            input_handlers: Input scheme registry (default http/https/file)
            output_handlers: Output scheme registry (default s3/http/https/capture/file)
        """
        self._shell_command = shell_command
        self._notifier = notifier
        self._input_rewriter = input_rewriter
        self._output_rewriter = output_rewriter
        self._temp_dir = temp_dir
        self._input_handlers = input_handlers or HandlerRegistry.create_default_inputs()
        self._output_handlers = output_handlers or HandlerRegistry.create_default_outputs(
            uploader=uploader
        )

    @classmethod
    def create(cls, shell_command: ShellCommand, **options) -> "ShellCommandRunner":
        return cls(shell_command, **options)

    @property
    def shell_command(self) -> ShellCommand:
        return self._shell_command

    def run(self) -> RunResult:
        """
        Execute the ShellCommand and notify listeners.

        Returns:
            The RunResult, also passed to every notifier call

        Raises:
            NotifierNotConfiguredError: If notifications are set but no notifier is
            Exception: Anything a notifier raises
        """
        state = _RunState(allocator=TempFileAllocator(self._temp_dir))

        error: Optional[Exception] = None
        try:
            for phase in (
                self._resolve_inputs,
                self._prepare_outputs,
                self._run_commands,
                self._deliver_outputs,
            ):
                phase_name = phase.__name__.lstrip("_")
                logger.debug(f"Starting phase {phase_name}", extra={"phase": phase_name})
                error = phase(state)
                if error is not None:
                    break
        finally:
            self._cleanup(state)

        result = self._build_result(state, error)
        if result.ok:
            logger.info("Run completed successfully")
        else:
            logger.error(f"Run failed: {result.error}")

        self._send_notifications(result)
        return result

    def _resolve_inputs(self, state: _RunState) -> Optional[Exception]:
        """Phase 1: fetch every input into its own temp file."""
        for name, url in self._shell_command.get_inputs().items():
            try:
                state.inputs[name] = self._resolve_input(url, state.allocator)
            except Exception as e:
                return e
        return None

    def _resolve_input(self, url: str, allocator: TempFileAllocator) -> Path:
        source_url = url
        if self._input_rewriter is not None:
            source_url = self._input_rewriter(url)

        handler = self._input_handlers.for_url(source_url)

        # Extension comes from the URL as written in the ShellCommand
        path = allocator.allocate(INPUT_PREFIX, url_extension(url))
        handler.fetch(source_url, path)
        return path

    def _prepare_outputs(self, state: _RunState) -> Optional[Exception]:
        """Phase 2: allocate an empty temp file per output."""
        for name, url in self._shell_command.get_outputs().items():
            try:
                state.outputs[name] = state.allocator.allocate(OUTPUT_PREFIX, url_extension(url))
            except Exception as e:
                return e
        return None

    def _run_commands(self, state: _RunState) -> Optional[Exception]:
        """Phase 3: substitute placeholders and run each command in order."""
        substitute = make_substituter(build_replacements(state.inputs, state.outputs))
        for template in self._shell_command.get_commands():
            command = substitute(template)
            logger.info(f"Running command {command}", extra={"command": command})
            try:
                completed = subprocess.run(
                    command,
                    shell=True,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    encoding="utf-8",
                    errors="replace",
                )
            except (OSError, ValueError) as e:
                # ValueError: the command contains a NUL byte
                return ExecError(command, str(e), -1)
            if completed.returncode != 0:
                return ExecError(command, completed.stdout.rstrip("\n"), completed.returncode)
        return None

    def _deliver_outputs(self, state: _RunState) -> Optional[Exception]:
        """Phase 4: send every output to its destination."""
        for name, url in self._shell_command.get_outputs().items():
            try:
                self._deliver_output(name, url, state)
            except Exception as e:
                return e
        return None

    def _deliver_output(self, name: str, url: str, state: _RunState) -> None:
        target_url = url
        if self._output_rewriter is not None:
            target_url = self._output_rewriter(url)

        if target_url == DEV_NULL:
            logger.info(f"Skipping output {name} because the target URL is {DEV_NULL}.")
            return

        source = state.outputs[name]
        if not source.exists():
            raise MissingOutputFileError(str(source))

        handler = self._output_handlers.for_url(target_url)
        logger.info(f"Delivering output {name} to {target_url}", extra={"url": target_url})
        handler.deliver(source, target_url, state.context)

    def _cleanup(self, state: _RunState) -> None:
        """Phase 5: remove every temp file of this run."""
        failed = state.allocator.cleanup()
        if failed:
            logger.warning(f"{len(failed)} temp file(s) could not be removed")

    def _build_result(self, state: _RunState, error: Optional[Exception]) -> RunResult:
        """Phase 6: assemble the result record."""
        if error is None:
            return RunResult(
                status=RunStatus.SUCCESS,
                capture=dict(state.context.capture),
                custom_data=self._shell_command.get_custom_data(),
            )
        return RunResult(
            status=RunStatus.FAILURE,
            error=str(error) or type(error).__name__,
            capture=dict(state.context.capture),
            custom_data=self._shell_command.get_custom_data(),
            exception=error,
        )

    def _send_notifications(self, result: RunResult) -> None:
        """Phase 7: hand the result to every notification URL."""
        notifications = self._shell_command.get_notifications()
        if not notifications:
            return
        if self._notifier is None:
            raise NotifierNotConfiguredError(
                f"{len(notifications)} notification(s) requested but no notifier is configured."
            )

        logger.info(f"Sending {len(notifications)} notification(s)")
        for url in notifications:
            self._notifier(url, result)
