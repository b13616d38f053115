import json
import logging
import os

from werbench import config

logger = logging.getLogger(__name__)

SETTINGS_FILE = config.SETTINGS_FILE

_DEFAULTS = {
    "model_name": config.DEFAULT_MODEL_NAME,
    "max_input_words": config.MAX_INPUT_WORDS,
    "wer_threshold": config.DEFAULT_WER_THRESHOLD,
    "db_path": config.DB_PATH,
}


def settings_path() -> str:
    """WERBENCH_SETTINGS overrides the default settings.json location."""
    return os.environ.get("WERBENCH_SETTINGS") or SETTINGS_FILE


class SettingsManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SettingsManager, cls).__new__(cls)
            cls._instance.settings = {}
            cls._instance.load()
        return cls._instance

    def load(self):
        path = settings_path()
        if os.path.exists(path):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    self.settings = json.load(f)
                logger.info("Settings loaded from %s", path)
            except (OSError, ValueError) as e:
                logger.error("Failed to load settings from %s: %s", path, e)
                self.settings = {}
        else:
            self.settings = {}

    def save(self):
        path = settings_path()
        try:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4)
            logger.info("Settings saved to %s", path)
        except OSError as e:
            logger.error("Failed to save settings to %s: %s", path, e)

    def get(self, key, default=None):
        if default is None:
            default = _DEFAULTS.get(key)
        return self.settings.get(key, default)

    def set(self, key, value):
        self.settings[key] = value
        self.save()

    @classmethod
    def reset(cls):
        """Reset singleton instance. Used in tests to prevent state pollution."""
        cls._instance = None
