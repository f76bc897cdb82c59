"""Logging for the shot simulator.

Modules log under ``qsim_engine.<name>``; nothing is printed until an
entry point calls ``setup_logging``.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = 'qsim_engine'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Attach a stdout handler (and optionally a file) to the package logger.

    Calling it again replaces the previous handlers.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        logger.addHandler(h)
    return logger


def get_logger(name: str) -> logging.Logger:
    """``get_logger("runner.executor")`` → ``qsim_engine.runner.executor``."""
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')
