import logging
import sys
from logging.handlers import RotatingFileHandler

import pytest

from werbench.settings import SettingsManager


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings, logs and databases inside tmp_path for every test."""
    monkeypatch.setenv("WERBENCH_SETTINGS", str(tmp_path / "settings.json"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_CONSOLE", "false")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    SettingsManager.reset()
    yield
    SettingsManager.reset()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "experiments.db"


@pytest.fixture
def settings_file(tmp_path):
    """Settings file with a custom threshold and model name."""
    path = tmp_path / "settings.json"
    path.write_text('{"wer_threshold": 0.1, "model_name": "Whisper (Tiny)"}')
    return path
