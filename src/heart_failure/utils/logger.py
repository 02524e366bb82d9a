import logging
import sys
from contextlib import contextmanager
from typing import Iterator

ROOT_LOGGER = "heart_failure"
_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a timestamped console logger namespaced under ``heart_failure``."""
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_level(level: int | str) -> None:
    """Change the verbosity of every pipeline logger at once."""
    _configure_root().setLevel(level)


@contextmanager
def quieted(name: str, level: int = logging.WARNING) -> Iterator[logging.Logger]:
    """Temporarily raise the threshold of one component logger."""
    logger = get_logger(name)
    previous = logger.level
    logger.setLevel(level)
    try:
        yield logger
    finally:
        logger.setLevel(previous)
