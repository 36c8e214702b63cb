"""Logging for a process hosting the broker.

Root gets the handlers; broker loggers get their own levels from
settings["logging"]["loggers"], so push/wake tracing in relay.events can be
turned to DEBUG without flooding the host's other loggers.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level(name: Any, default: int = logging.INFO) -> int:
    return getattr(logging, str(name).upper(), default)


def _handlers(project_root: Path, cfg: dict[str, Any]) -> list[logging.Handler]:
    """Rotating file if 'file' is set, console if asked for or if no file."""
    handlers: list[logging.Handler] = []
    log_file = cfg.get("file")
    if log_file:
        log_path = project_root / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
                backupCount=int(cfg.get("backup_count", 3)),
                encoding="utf-8",
            )
        )
    if cfg.get("log_to_console") or not handlers:
        handlers.append(logging.StreamHandler())
    return handlers


def setup_logging(project_root: Path, settings: dict[str, Any]) -> None:
    """Install handlers on the root logger and apply per-logger levels."""
    cfg = settings.get("logging", {})
    root_level = _level(cfg.get("level", "INFO"))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    root = logging.getLogger()
    root.setLevel(root_level)
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in _handlers(project_root, cfg):
        h.setFormatter(formatter)
        root.addHandler(h)

    # handlers stay at NOTSET so a DEBUG broker logger is not filtered twice
    for name, level in (cfg.get("loggers") or {}).items():
        logging.getLogger(name).setLevel(_level(level, root_level))
