from __future__ import annotations

import logging
import os
from pathlib import Path


LOGGER_NAME = "gifindex"
_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(*, log_file: Path | None = None, verbose: bool = True) -> logging.Logger:
    """
    Set up logging for gifindex.

    Args:
        log_file: Optional file that receives a DEBUG-level copy of the run log
        verbose: If True (default), show DEBUG level logs (every visited path).
            If False, only show INFO and above.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    fmt = logging.Formatter(_FORMAT)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file is not None:
        attach_logfile(logger, log_file)

    logger.propagate = False
    return logger


def attach_logfile(logger: logging.Logger, log_file: Path) -> None:
    """
    Adds a file handler for `log_file` if one is not already present.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file):
            return

    fh = logging.FileHandler(log_file)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(fh)
