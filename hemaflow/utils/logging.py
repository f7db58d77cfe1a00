"""
Logging utilities for HemaFlow

Console output goes through colorlog. Level, format, colours and an optional
log file come from the ``logging`` section of the configuration.
"""

import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import colorlog

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Libraries that log at INFO/DEBUG on every figure or fit
NOISY_LOGGERS = ("matplotlib", "PIL", "fontTools", "numba")


def _as_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level}")
    return value


def _console_handler(fmt: str, datefmt: str, use_colors: bool) -> logging.Handler:
    if use_colors:
        handler = colorlog.StreamHandler(sys.stdout)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s" + fmt, datefmt=datefmt, log_colors=LEVEL_COLORS
            )
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(log_file: Union[str, Path], fmt: str, datefmt: str) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Set up logging for HemaFlow

    Replaces the root handlers with a console handler (coloured unless
    ``use_colors`` is False) and, when ``log_file`` is given, a plain file
    handler. Third-party loggers in ``quiet_loggers`` are raised to WARNING.

    Args:
        level: Logging level name or constant
        log_file: Optional file to write logs to
        format_string: Record format, ``DEFAULT_FORMAT`` when None
        use_colors: Colour console output by level
        quiet_loggers: Logger names limited to warnings and above

    Returns:
        The ``hemaflow`` package logger
    """
    level = _as_level(level)
    fmt = format_string or DEFAULT_FORMAT

    handlers = [_console_handler(fmt, DEFAULT_DATE_FORMAT, use_colors)]
    if log_file:
        handlers.append(_file_handler(log_file, fmt, DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    hemaflow_logger = logging.getLogger("hemaflow")
    hemaflow_logger.setLevel(level)
    return hemaflow_logger


def setup_logging_from_config(
    logging_config: Dict[str, Any],
    level: Optional[Union[str, int]] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Apply a ``logging`` config section; explicit arguments take precedence"""
    return setup_logging(
        level=level if level is not None else logging_config.get("level", "INFO"),
        log_file=log_file if log_file is not None else logging_config.get("log_file"),
        format_string=logging_config.get("format"),
        use_colors=logging_config.get("use_colors", True),
        quiet_loggers=logging_config.get("quiet_loggers", NOISY_LOGGERS),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module"""
    if name.startswith("hemaflow"):
        return logging.getLogger(name)
    return logging.getLogger(f"hemaflow.{name}")


def log_execution_time(func):
    """Decorator to log execution time of functions"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.time()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed after {time.time() - start_time:.2f} seconds: {e}")
            raise

        logger.info(f"{func.__name__} completed in {time.time() - start_time:.2f} seconds")
        return result

    return wrapper
