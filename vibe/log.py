import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from vibe.config import AppPaths
from vibe.constants import DEFAULT_LOG_FILE_NAME, LOG_FILE_NAME_ENV, LOG_LEVEL_ENV


ROOT_LOGGER = "vibe"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_env(default: int = logging.INFO) -> int:
    value = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not value:
        return default
    if value == "WARN":
        value = "WARNING"
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else default


def setup_logging(
    paths: Optional[AppPaths] = None,
    verbose: bool = False,
    debug: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure the package logger.

    Console output goes through rich on stderr, WARNING by default.
    ``--verbose`` lowers it to INFO and ``--debug`` to DEBUG. When
    ``paths`` is given, a file handler under the log directory receives
    records at ``LOG_LEVEL`` (INFO when unset).
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    rich_handler.setLevel(console_level)
    logger.addHandler(rich_handler)

    levels = [console_level]
    if paths is not None:
        log_path = paths.log_file(os.environ.get(LOG_FILE_NAME_ENV) or DEFAULT_LOG_FILE_NAME)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as exc:
            logger.warning("File logging disabled | path=%s error=%s", log_path, exc)
        else:
            file_level = logging.DEBUG if debug else _level_from_env()
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
            logger.addHandler(file_handler)
            levels.append(file_level)

    logger.setLevel(min(levels))
    logger.propagate = False
    return logger
