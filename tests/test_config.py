"""Tests for configuration loading and runner wiring."""

import pytest

from shellrun.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_TEXT,
    RunnerConfig,
    build_runner,
    load_config,
)
from shellrun.errors import ConfigError
from shellrun.schemas import RunStatus, ShellCommand


def _write(path, text):
    path.write_text(text)
    return path


# =============================================================================
# LOADING
# =============================================================================


class TestLoadConfig:
    """Tests for load_config lookup order."""

    def test_defaults_without_file(self):
        config = load_config()

        assert config.source is None
        assert config.temp_dir is None
        assert config.s3_key is None
        assert config.http_timeout is None
        assert config.input_rewrites == {}
        assert config.webhook_notifications is True
        assert config.get_log_level() == "INFO"
        assert config.get_log_format() == "pretty"
        assert config.get_log_file_path() is None
        assert config.should_log_to_console() is True

    def test_reads_cwd_file(self, tmp_path):
        _write(tmp_path / DEFAULT_CONFIG_NAME, "temp_dir: /var/tmp/sr\n")

        config = load_config()

        assert str(config.temp_dir) == "/var/tmp/sr"
        assert config.source == tmp_path / DEFAULT_CONFIG_NAME

    def test_env_var_wins_over_cwd(self, tmp_path, monkeypatch):
        _write(tmp_path / DEFAULT_CONFIG_NAME, "temp_dir: /from/cwd\n")
        env_file = _write(tmp_path / "env.yaml", "temp_dir: /from/env\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))

        assert str(load_config().temp_dir) == "/from/env"

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path / "custom.yaml", "http:\n  timeout: 30\n")

        assert load_config(path).http_timeout == 30

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_missing_env_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.yaml"))

        with pytest.raises(ConfigError):
            load_config()

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path / "bad.yaml", "s3: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_empty_file(self, tmp_path):
        path = _write(tmp_path / "empty.yaml", "")

        assert load_config(path).webhook_notifications is True

    def test_default_config_text_is_valid(self, tmp_path):
        path = _write(tmp_path / "default.yaml", DEFAULT_CONFIG_TEXT)

        config = load_config(path)

        assert config.get_log_level() == "INFO"
        assert config.input_rewrites == {}


# =============================================================================
# VALIDATION
# =============================================================================


class TestValidation:
    """Tests for RunnerConfig.validate."""

    def test_full_config(self):
        config = RunnerConfig({
            "s3": {"key": "AKIA", "secret": "shh", "region": "eu-west-1"},
            "http": {"timeout": 12.5},
            "rewrite": {"inputs": {"s3://a/": "file:///a/"}},
            "notifications": {"webhook": False},
            "logging": {"level": "debug", "format": "structured"},
        })

        assert config.s3_region == "eu-west-1"
        assert config.http_timeout == 12.5
        assert config.input_rewrites == {"s3://a/": "file:///a/"}
        assert config.webhook_notifications is False
        assert config.get_log_level() == "DEBUG"

    def test_key_without_secret(self):
        with pytest.raises(ConfigError, match="together"):
            RunnerConfig({"s3": {"key": "AKIA"}})

    @pytest.mark.parametrize("timeout", [0, -5, "soon", True])
    def test_bad_timeout(self, timeout):
        with pytest.raises(ConfigError, match="http.timeout"):
            RunnerConfig({"http": {"timeout": timeout}})

    def test_bad_webhook_flag(self):
        with pytest.raises(ConfigError, match="webhook"):
            RunnerConfig({"notifications": {"webhook": "yes"}})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError, match="logging.level"):
            RunnerConfig({"logging": {"level": "LOUD"}})

    def test_bad_log_format(self):
        with pytest.raises(ConfigError, match="logging.format"):
            RunnerConfig({"logging": {"format": "xml"}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigError, match="'s3'"):
            RunnerConfig({"s3": ["key"]})

    def test_rewrite_map_must_be_strings(self):
        with pytest.raises(ConfigError, match="rewrite.outputs"):
            RunnerConfig({"rewrite": {"outputs": {"s3://a/": 3}}})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            RunnerConfig(["not", "a", "mapping"])

    def test_log_file_date_interpolation(self, tmp_path):
        config = RunnerConfig({"logging": {"output": str(tmp_path / "run-{date}.log")}})

        path = config.get_log_file_path()

        assert "{date}" not in str(path)
        assert path.name.startswith("run-20")


# =============================================================================
# WIRING
# =============================================================================


class TestBuildRunner:
    """Tests for build_runner."""

    def test_defaults(self):
        runner = build_runner(ShellCommand.create().add_command("true"))

        assert runner.run().status == RunStatus.SUCCESS

    def test_temp_dir_and_rewrites(self, tmp_path):
        media = tmp_path / "media"
        media.mkdir()
        (media / "clip.txt").write_bytes(b"local copy")
        temp_dir = tmp_path / "work"
        config = RunnerConfig({
            "temp_dir": str(temp_dir),
            "rewrite": {
                "inputs": {"s3://media/": f"file://{media}/"},
                "outputs": {"s3://scratch/": "/dev/null"},
            },
        })
        sc = (
            ShellCommand.create()
            .add_input("clip", "s3://media/clip.txt")
            .add_output("copy", "capture://copy")
            .add_output("junk", "s3://scratch/")
            .add_command("cat %%inputs.clip%% > %%outputs.copy%%")
        )

        result = build_runner(sc, config).run()

        assert result.ok, result.error
        assert result.capture == {"copy": b"local copy"}
        assert temp_dir.is_dir()
        assert list(temp_dir.iterdir()) == []

    def test_webhook_disabled_has_no_notifier(self):
        config = RunnerConfig({"notifications": {"webhook": False}})
        sc = ShellCommand.create().add_notification("http://example.com/hook")

        from shellrun.errors import NotifierNotConfiguredError

        with pytest.raises(NotifierNotConfiguredError):
            build_runner(sc, config).run()
