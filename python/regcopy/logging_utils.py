import logging
import sys
import traceback
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def resolve_level(level: Union[int, str, None]) -> int:
    """Turn a level name such as "debug" or "WARNING" into a logging level.

    Unknown names fall back to INFO.
    """
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[int, str, None] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging once. Later calls only adjust the level, if one is given.

    Records go to stdout with a full timestamp.
    """
    root = logging.getLogger()
    if root.handlers:
        if level is not None:
            root.setLevel(resolve_level(level))
        return
    logging.basicConfig(level=resolve_level(level), format=fmt or DEFAULT_FORMAT, stream=sys.stdout)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module/logger by name, after ensuring logging is configured."""
    setup_logging()
    return logging.getLogger(name) if name else logging.getLogger(__name__)


def log_exception(logger: logging.Logger, message: str = "An error occurred", exc_info: Exception = None) -> None:
    """Centralized exception logging with full traceback.

    Args:
        logger: Logger instance to use
        message: Custom error message to log before the traceback
        exc_info: Exception instance (if None, uses current exception context)
    """
    logger.error(message)
    if exc_info is not None:
        logger.error(f"Exception type: {type(exc_info).__name__}")
        logger.error(f"Exception message: {str(exc_info)}")
    logger.error("Full traceback:")
    logger.error(traceback.format_exc())
