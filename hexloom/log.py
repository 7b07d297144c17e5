import logging
import sys

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", quiet: bool = False, name: str = "hexloom") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Handlers from an earlier call are dropped first, so repeated CLI runs in
    one process do not print lines twice.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()
    if quiet:
        logger.addHandler(logging.NullHandler())
        return logger
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
