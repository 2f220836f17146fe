"""Logging configuration for metricview."""

import logging
import sys

logger = logging.getLogger("metricview")


def setup_logger(level: int = logging.INFO) -> None:
    """Setup the metricview logger with default configuration.

    Args:
        level: Logging level (default: INFO)
    """
    if logger.handlers:
        # Already configured
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("metricview: %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


setup_logger()
