"""
CLI interface for shellrun.

Runs and validates ShellCommand JSON files:

    shellrun run job.json
    shellrun --config shellrun.yaml run job.json --json
    shellrun validate job.json
    shellrun init
"""

import json
import sys
from pathlib import Path

import click

from shellrun import __version__
from shellrun.errors import ShellRunError, ValidationError


def _read_spec(spec_file: str) -> str:
    if spec_file == "-":
        return sys.stdin.read()
    path = Path(spec_file)
    if not path.exists():
        raise click.BadParameter(f"File not found: {spec_file}", param_hint="SPEC_FILE")
    return path.read_text(encoding="utf-8")


@click.group()
@click.version_option(version=__version__, prog_name="shellrun")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to shellrun.yaml (default: $SHELLRUN_CONFIG or ./shellrun.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def main(ctx, config_path, log_level):
    """
    shellrun - Run declarative shell pipelines.

    Fetches inputs, runs commands over them and delivers the outputs.
    """
    from shellrun.config import load_config

    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    try:
        ctx.obj["config"] = load_config(config_path)
    except ShellRunError as e:
        # init does not need a config; other commands check config_error
        ctx.obj["config_error"] = str(e)


def _get_config(ctx):
    if "config" not in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}", err=True)
        raise SystemExit(1)
    return ctx.obj["config"]


@main.command("run")
@click.argument("spec_file")
@click.option("--json", "as_json", is_flag=True, help="Print the result record as JSON")
@click.pass_context
def run_cmd(ctx, spec_file, as_json):
    """Run the ShellCommand in SPEC_FILE ('-' reads stdin)."""
    from shellrun.config import build_runner
    from shellrun.schemas import ShellCommand
    from shellrun.utils import setup_logging

    config = _get_config(ctx)
    setup_logging(
        log_file=config.get_log_file_path(),
        log_level=ctx.obj.get("log_level") or config.get_log_level(),
        log_format=config.get_log_format(),
        console_output=config.should_log_to_console(),
    )

    try:
        shell_command = ShellCommand.create_from_json(_read_spec(spec_file))
    except ValidationError as e:
        click.echo(f"✗ Invalid ShellCommand: {e}", err=True)
        raise SystemExit(1)

    try:
        result = build_runner(shell_command, config).run()
    except ShellRunError as e:
        click.echo(f"✗ Notification failed: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        click.echo(f"✓ Run completed ({len(shell_command.commands)} command(s))")
        for key, value in result.capture.items():
            click.echo(f"  capture {key}: {len(value)} byte(s)")
    else:
        click.echo(f"✗ Run failed: {result.error}", err=True)

    if not result.ok:
        raise SystemExit(1)


@main.command()
@click.argument("spec_file")
def validate(spec_file):
    """Check that SPEC_FILE is a well-formed ShellCommand."""
    from shellrun.schemas import ShellCommand

    try:
        shell_command = ShellCommand.create_from_json(_read_spec(spec_file))
    except ValidationError as e:
        click.echo(f"✗ Invalid ShellCommand: {e}", err=True)
        raise SystemExit(1)

    click.echo(
        f"✓ Valid: {len(shell_command.inputs)} input(s), "
        f"{len(shell_command.commands)} command(s), "
        f"{len(shell_command.outputs)} output(s), "
        f"{len(shell_command.notifications)} notification(s)"
    )


@main.command()
@click.argument("path", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(path, force):
    """Write a starter shellrun.yaml (default: ./shellrun.yaml)."""
    from shellrun.config import DEFAULT_CONFIG_NAME, DEFAULT_CONFIG_TEXT

    path = path or Path.cwd() / DEFAULT_CONFIG_NAME
    if path.exists() and not force:
        click.echo(f"✗ {path} already exists (use --force to overwrite)", err=True)
        raise SystemExit(1)

    path.write_text(DEFAULT_CONFIG_TEXT)
    click.echo(f"✓ Wrote {path}")


if __name__ == "__main__":
    main()
