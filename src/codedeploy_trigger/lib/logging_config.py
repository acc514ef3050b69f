"""Centralized logging configuration for codedeploy-trigger.

Configures a single stderr handler for the CLI, with verbosity controlled by
the --verbose and --quiet flags. The AWS SDK loggers are kept at WARNING
unless verbose output is requested.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"

ROOT_LOGGER_NAME = "codedeploy_trigger"

# Third-party loggers that are noisy at INFO/DEBUG
THIRD_PARTY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: Enable DEBUG output, including AWS SDK loggers
        quiet: Only emit errors
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT, datefmt=DATE_FORMAT
        )
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    sdk_level = logging.DEBUG if verbose else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module in this package."""
    return logging.getLogger(name)
