import os

# Paths: per-user state directory, WERBENCH_HOME overrides
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.abspath(os.environ.get("WERBENCH_HOME") or os.path.join(os.path.expanduser("~"), ".werbench"))
DB_PATH = os.path.join(DATA_DIR, "experiments.db")
LOGS_DIR = os.path.join(DATA_DIR, "logs")
SETTINGS_FILE = os.path.join(DATA_DIR, "settings.json")

# Grading (display only, the engine does not enforce these)
WER_GOOD = 0.10
WER_MODERATE = 0.25

# Dashboard histogram: (label, inclusive upper bound)
WER_BINS = (
    ("< 10%", 0.10),
    ("10-20%", 0.20),
    ("20-40%", 0.40),
    ("40%+", float("inf")),
)

# Experiments
DEFAULT_MODEL_NAME = "Manual entry"
DEFAULT_WER_THRESHOLD = 0.25
MAX_INPUT_WORDS = 5000  # distance table is quadratic in text length
