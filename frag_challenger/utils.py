"""
Logging and timing helpers shared by the parent process and the workers.
"""

import logging
import sys
import time


LOG_FORMAT = "[Challenger] %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Install a '[Challenger]' stream handler on the package logger."""
    logger = logging.getLogger("frag_challenger")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def init_worker_logging(level: int) -> None:
    """Pool initializer: workers started without fork inherit no handlers."""
    logger = logging.getLogger("frag_challenger")
    if not logger.handlers:
        setup_logging(verbose=level <= logging.DEBUG)
    logger.setLevel(level)


def format_elapsed(start_time: float) -> str:
    """Wall time since start_time as 'Hh Mm'."""
    total_minutes = int(time.time() - start_time) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"
