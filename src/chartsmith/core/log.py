"""
Logging setup for Chartsmith.

Modules log through logging.getLogger("chartsmith.<area>"). The CLI calls
configure_logging() once to attach a rich handler to the "chartsmith" logger.
"""

import logging
import threading
from typing import Any, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "chartsmith"

# Guards level and handler changes on the shared "chartsmith" logger
_lock = threading.Lock()

_DECORATORS = {0: ">", 1: "→", 2: "+"}


def configure_logging(level: Union[int, str] = logging.INFO,
                      console: Optional[Console] = None) -> logging.Logger:
    """
    Installs a RichHandler on the chartsmith logger and sets its level.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        log_time_format="%d-%m-%Y %H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    with _lock:
        for existing in list(logger.handlers):
            if isinstance(existing, RichHandler):
                logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return logger


def set_level(level: Union[int, str]) -> None:
    with _lock:
        logging.getLogger(ROOT_LOGGER).setLevel(level)


def echo(level: int, message: Any, logger: Optional[logging.Logger] = None) -> str:
    """
    Logs a sequential, indent-based progress line at INFO.

    Level 0 is decorated with '>', 1 with a right arrow, 2 with '+', anything
    deeper with '-'. Returns the formatted line.
    """
    decorator = _DECORATORS.get(level, "-")
    line = f"{'  ' * level}{decorator} {message}"
    (logger or logging.getLogger(ROOT_LOGGER)).info(line)
    return line
