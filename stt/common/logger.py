import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from stt.common.setup import PATHS
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Returns True if the logger already carries a handler registered under the given name, so that repeat
# get_logger() calls never stack duplicate handlers.
def _has_handler(logger: logging.Logger, handler_name: str) -> bool:
    return any(h.get_name() == handler_name for h in logger.handlers)

# Names, levels, formats and attaches a handler in one go.
def _attach(logger: logging.Logger, handler: logging.Handler, handler_name: str, level, fmt):
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)

# Keeps only the newest `keep` per-run debug logs in the given folder.
def _prune_runs(run_dir: Path, name: str, keep: int):
    runs = sorted(run_dir.glob(f"{name}_*.log"),key=lambda p: p.stat().st_mtime,reverse=True)
    for run in runs[keep:]:
        try: run.unlink()
        except OSError: pass

def get_logger(
        name = "simpletimetracker",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 5 * 1024 * 1024,
        backup_count = 5,
        persistent = True,
        console = False,
        historical_debugs: int = 10
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    # Rotating log that survives across runs
    if persistent and not _has_handler(logger, f"{name}:persistent"):
        _attach(logger,
                RotatingFileHandler(filename=log_dir / f"{name}.log", maxBytes=max_bytes,
                                    backupCount=backup_count, encoding="utf-8"),
                f"{name}:persistent", level, fmt)

    # latest.log is truncated at every start, handy when someone reports a problem right after it happens
    if not _has_handler(logger, f"{name}:latest"):
        _attach(logger,
                logging.FileHandler(filename=log_dir / "latest.log", mode="w", encoding="utf-8"),
                f"{name}:latest", level, fmt)

    # One full DEBUG log per run, only the newest few are kept around
    if historical_debugs > 0 and not _has_handler(logger, f"{name}:historical_debug"):
        run_dir = log_dir / "debug"
        run_dir.mkdir(parents=True,exist_ok=True)
        _attach(logger,
                logging.FileHandler(filename=run_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log",
                                    encoding="utf-8"),
                f"{name}:historical_debug", logging.DEBUG, fmt)
        _prune_runs(run_dir, name, historical_debugs)

    if console and not _has_handler(logger, f"{name}:console"):
        _attach(logger, logging.StreamHandler(), f"{name}:console", level, fmt)

    return logger

log = get_logger(level=logging.DEBUG,console=bool(os.getenv("STT_LOG_CONSOLE")),historical_debugs=10)
log.info("=== STARTED SIMPLE TIME TRACKER ===")

# Changes the level of the user-facing handlers at runtime. The per-run debug log stays at DEBUG regardless.
def set_level(level, logger: logging.Logger = log):
    for handler in logger.handlers:
        if not handler.get_name().endswith(":historical_debug"):
            handler.setLevel(level)
