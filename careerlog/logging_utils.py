"""Console logging for the careerlog command line."""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

ROOT_LOGGER = "CareerLog"
_FORMAT = "%(levelname)-7s %(name)s: %(message)s"


def level_for(verbose: int) -> int:
    """``-v`` shows INFO, ``-vv`` and more show DEBUG."""
    if verbose >= 2:
        return logging.DEBUG
    return logging.INFO if verbose == 1 else logging.WARNING


def setup_logging(verbose: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Print ``CareerLog.*`` records to ``stream`` (stderr by default).

    Calling it again swaps the console handler rather than adding a second one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level_for(verbose))
    for handler in [h for h in logger.handlers if getattr(h, "careerlog_console", False)]:
        logger.removeHandler(handler)

    console = logging.StreamHandler(stream or sys.stderr)
    console.careerlog_console = True  # type: ignore[attr-defined]
    console.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(console)
    return logger
