"""
Configuration management for shellrun.

Loads and validates shellrun.yaml:

    temp_dir: /var/tmp/shellrun
    s3:
      key: AKIA...
      secret: ...
      region: us-east-1
    http:
      timeout: 300
    rewrite:
      inputs:
        "s3://media/": "file:///srv/media/"
      outputs: {}
    notifications:
      webhook: true
    logging:
      level: INFO
      format: pretty
      output: logs/shellrun-{date}.log
      console: true

Every key is optional. Environment variables are only read here, to locate
the file; the runner itself never looks at the environment.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from shellrun.errors import ConfigError
from shellrun.schemas import ShellCommand

CONFIG_ENV_VAR = "SHELLRUN_CONFIG"
DEFAULT_CONFIG_NAME = "shellrun.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("structured", "pretty")

DEFAULT_CONFIG_TEXT = """\
# shellrun configuration
# temp_dir: /var/tmp/shellrun
s3:
  key: null
  secret: null
  region: null
http:
  timeout: null
rewrite:
  inputs: {}
  outputs: {}
notifications:
  webhook: true
logging:
  level: INFO
  format: pretty
  output: null
  console: true
"""


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return value


def _str_map(section: Dict[str, Any], name: str) -> Dict[str, str]:
    value = section.get(name) or {}
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ConfigError(f"'rewrite.{name}' must map URL prefixes to URL prefixes")
    return dict(value)


class RunnerConfig:
    """Complete shellrun configuration."""

    def __init__(self, raw: Optional[Dict[str, Any]] = None, source: Optional[Path] = None):
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ConfigError("Configuration must be a mapping")
        self.source = source

        temp_dir = raw.get("temp_dir")
        self.temp_dir: Optional[Path] = Path(temp_dir) if temp_dir else None

        s3 = _section(raw, "s3")
        self.s3_key: Optional[str] = s3.get("key")
        self.s3_secret: Optional[str] = s3.get("secret")
        self.s3_region: Optional[str] = s3.get("region")

        http = _section(raw, "http")
        self.http_timeout: Optional[float] = http.get("timeout")

        rewrite = _section(raw, "rewrite")
        self.input_rewrites = _str_map(rewrite, "inputs")
        self.output_rewrites = _str_map(rewrite, "outputs")

        notifications = _section(raw, "notifications")
        self.webhook_notifications = notifications.get("webhook", True)

        self.logging = _section(raw, "logging")

        self.validate()

    @classmethod
    def from_file(cls, config_path: Path) -> "RunnerConfig":
        """Load and parse a YAML configuration file."""
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path, "r") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {e}")
        return cls(raw or {}, source=config_path)

    def validate(self) -> None:
        """Validate the configuration values."""
        if bool(self.s3_key) != bool(self.s3_secret):
            raise ConfigError("s3.key and s3.secret must be set together")

        if self.http_timeout is not None:
            if isinstance(self.http_timeout, bool) or not isinstance(self.http_timeout, (int, float)):
                raise ConfigError("http.timeout must be a number of seconds")
            if self.http_timeout <= 0:
                raise ConfigError("http.timeout must be positive")

        if not isinstance(self.webhook_notifications, bool):
            raise ConfigError("notifications.webhook must be true or false")

        if self.get_log_level() not in LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")
        if self.get_log_format() not in LOG_FORMATS:
            raise ConfigError(f"logging.format must be one of {', '.join(LOG_FORMATS)}")

    def get_log_level(self) -> str:
        return str(self.logging.get("level", "INFO")).upper()

    def get_log_format(self) -> str:
        return self.logging.get("format", "pretty")

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path with date interpolation, or None for console only."""
        log_output = self.logging.get("output")
        if not log_output:
            return None
        return Path(log_output.replace("{date}", datetime.now().strftime("%Y-%m-%d")))

    def should_log_to_console(self) -> bool:
        return self.logging.get("console", True)

    def __repr__(self) -> str:
        return f"RunnerConfig(source={self.source}, temp_dir={self.temp_dir})"


def load_config(config_path: Optional[Path] = None) -> RunnerConfig:
    """
    Load shellrun configuration.

    Lookup order when config_path is None: $SHELLRUN_CONFIG, then
    ./shellrun.yaml; when neither exists all defaults apply.

    Raises:
        ConfigError: If an explicitly named file is missing or the config is invalid
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = Path(env_path)
        else:
            default = Path.cwd() / DEFAULT_CONFIG_NAME
            if not default.exists():
                return RunnerConfig()
            config_path = default

    return RunnerConfig.from_file(Path(config_path))


def build_runner(shell_command: ShellCommand, config: Optional[RunnerConfig] = None):
    """
    Wire a ShellCommandRunner from configuration.

    Args:
        shell_command: The ShellCommand to execute
        config: RunnerConfig (defaults apply when None)

    Returns:
        Configured ShellCommandRunner
    """
    from shellrun.handlers import HandlerRegistry
    from shellrun.notifier import WebhookNotifier
    from shellrun.rewriters import PrefixRewriter
    from shellrun.runner import ShellCommandRunner
    from shellrun.uploader import S3Uploader

    config = config or RunnerConfig()

    uploader = (
        S3Uploader()
        .set_credentials(config.s3_key, config.s3_secret)
        .set_region(config.s3_region)
    )

    notifier = WebhookNotifier(timeout=config.http_timeout) if config.webhook_notifications else None

    return ShellCommandRunner(
        shell_command,
        notifier=notifier,
        input_rewriter=PrefixRewriter(config.input_rewrites) if config.input_rewrites else None,
        output_rewriter=PrefixRewriter(config.output_rewrites) if config.output_rewrites else None,
        temp_dir=config.temp_dir,
        input_handlers=HandlerRegistry.create_default_inputs(timeout=config.http_timeout),
        output_handlers=HandlerRegistry.create_default_outputs(
            uploader=uploader, timeout=config.http_timeout
        ),
    )
