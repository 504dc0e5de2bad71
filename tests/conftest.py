import logging

import pytest

from shellrun.utils import LOGGER_NAME


@pytest.fixture
def temp_dir(tmp_path):
    """Isolated temp directory for runner temp files."""
    path = tmp_path / "shellrun-tmp"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Keep tests away from a developer's shellrun.yaml and $SHELLRUN_CONFIG."""
    monkeypatch.delenv("SHELLRUN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
