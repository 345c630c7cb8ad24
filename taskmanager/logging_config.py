"""Logging setup for the API process."""

import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int = logging.INFO) -> None:
    """Attach a single stderr handler to the ``taskmanager`` logger.

    Safe to call more than once (e.g. one app per test); previously
    installed handlers are replaced rather than duplicated.
    """
    logger = logging.getLogger("taskmanager")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
