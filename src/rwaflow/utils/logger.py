"""
Loguru sinks for the CLI and the orchestration workflows.

Console output is short and coloured; the daily file keeps everything at
DEBUG with source location.  Every record carries a ``workflow`` field
(``create``, ``purchase``, ``prove``, ``update-prices``, or ``-`` outside
a workflow) so interleaved requests can be told apart in the file.
"""
import functools
import sys
from pathlib import Path
from typing import Callable, Union

from loguru import logger

LOG_FILE_PREFIX = "rwa_flow"
NO_WORKFLOW = "-"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[workflow]: <13}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[workflow]} | "
    "{name}:{function}:{line} - {message}"
)


def log_file_name(day: str) -> str:
    """Name of the log file written on *day* (``YYYY-MM-DD``)."""
    return f"{LOG_FILE_PREFIX}_{day}.log"


def setup_logger(log_dir: Union[str, Path] = "logs", console_level: str = "INFO") -> Path:
    """Replace all sinks with the console and daily file sinks.

    Returns the directory the log files are written to.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "level": console_level,
                "format": CONSOLE_FORMAT,
                "colorize": True,
            },
            {
                "sink": log_path / log_file_name("{time:YYYY-MM-DD}"),
                "level": "DEBUG",
                "format": FILE_FORMAT,
                "rotation": "10 MB",
                "retention": "30 days",
                "compression": "zip",
                "enqueue": True,
                "encoding": "utf-8",
            },
        ],
        extra={"workflow": NO_WORKFLOW},
    )
    return log_path


def tag_workflow(name: str) -> Callable:
    """Decorator that tags every record logged inside the call with *name*."""

    def decorate(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            with logger.contextualize(workflow=name):
                return fn(*args, **kwargs)

        return wrapper

    return decorate
