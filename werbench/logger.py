"""
werbench/logger.py — logging setup
===================================
  - Custom TRACE level (5) for per-comparison engine events
  - Console handler + rotating plain-text file (~/.werbench/logs/werbench.log, 5MB × 3)
  - Level from LOG_LEVEL env var → .env file → default (INFO)
  - sys.excepthook that logs unhandled CLI crashes with an error id

Usage:
    from werbench.logger import init_logging, get_logger
    init_logging("werbench")
    log = get_logger(__name__)
    log.trace("alignment_built", ...)
    log.info("experiment_saved id=%s", exp.id)
"""
from __future__ import annotations

import logging
import logging.handlers
import os
import sys
import time
import traceback
import uuid
from pathlib import Path
from typing import Any

from werbench import config

# ─── TRACE custom level ──────────────────────────────────────────────────────

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


logging.Logger.trace = _trace  # type: ignore[attr-defined]

# ─── Constants ────────────────────────────────────────────────────────────────

LOGS_DIR = Path(config.LOGS_DIR)

_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
    "CRITICAL": logging.CRITICAL,
}

_component: str = "werbench"


# ─── Public API ───────────────────────────────────────────────────────────────

def _load_dotenv(root: Path | None = None) -> dict[str, str]:
    """Read KEY=VALUE pairs from <root>/.env (default: working directory), ignoring comments and blanks."""
    env: dict[str, str] = {}
    env_path = (root or Path.cwd()) / ".env"
    if env_path.exists():
        with open(env_path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, _, val = line.partition("=")
                env[key.strip()] = val.strip()
    return env


def _resolve_level(dotenv: dict[str, str]) -> int:
    """LOG_LEVEL from env var > .env file > INFO default."""
    name = os.environ.get("LOG_LEVEL") or dotenv.get("LOG_LEVEL", "INFO")
    return _LEVELS.get(name.upper(), logging.INFO)


def init_logging(component: str = "werbench") -> logging.Logger:
    """
    Initialise werbench logging. Call once at process start (the CLI does).

    Sets up:
      - Root logger at the resolved level
      - Console StreamHandler on stderr (unless LOG_CONSOLE=false)
      - RotatingFileHandler in LOG_DIR (default ~/.werbench/logs); console only
        if that directory cannot be created
      - sys.excepthook crash logger

    Returns:
        The component logger.
    """
    global _component
    _component = component

    dotenv = _load_dotenv()
    level = _resolve_level(dotenv)
    log_console = (os.environ.get("LOG_CONSOLE") or dotenv.get("LOG_CONSOLE", "true")).lower() != "false"
    log_dir_str = os.environ.get("LOG_DIR") or dotenv.get("LOG_DIR", "")
    log_dir = Path(log_dir_str) if log_dir_str else LOGS_DIR

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers (avoid duplicate output on re-init)
    for handler in root.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            handler.close()
    root.handlers.clear()

    if log_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-7s] %(name)s — %(message)s",
            datefmt="%H:%M:%S",
        ))
        ch.setLevel(level)
        root.addHandler(ch)

    file_error = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            str(log_dir / f"{component}.log"), maxBytes=5_000_000, backupCount=3, encoding="utf-8"
        )
    except OSError as e:
        file_error = e
    else:
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-7s] %(name)s %(funcName)s:%(lineno)d — %(message)s"
        ))
        fh.setLevel(level)
        root.addHandler(fh)

    _install_excepthook(component)

    logger = logging.getLogger(component)
    if file_error is not None:
        logger.warning("file logging disabled, cannot write to %s: %s", log_dir, file_error)
    logger.info("logging_initialized component=%s level=%s dir=%s",
                component, logging.getLevelName(level), log_dir)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name or _component)


# ─── Root exception hook ──────────────────────────────────────────────────────

def _install_excepthook(component: str) -> None:

    def _hook(exctype: type, value: BaseException, tb: Any) -> None:
        if issubclass(exctype, KeyboardInterrupt):
            sys.__excepthook__(exctype, value, tb)
            return

        error_id = f"crash-{int(time.time())}-{uuid.uuid4().hex[:8]}"
        trace = "".join(traceback.format_exception(exctype, value, tb))
        sys.stderr.write(f"\n[FATAL] {error_id}\n{trace}\n")
        logging.getLogger(component).critical(
            "UNHANDLED EXCEPTION error_id=%s exc=%s\n%s", error_id, value, trace
        )

    sys.excepthook = _hook
