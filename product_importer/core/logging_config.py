# product_importer/core/logging_config.py

"""Logging setup for the product importer service.

Every module logs through ``logging.getLogger(__name__)``, so all records
end up under the ``product_importer`` logger configured here.
"""

import logging
import sys

from product_importer.core.config import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "product_importer"


def setup_logging(level: str = None) -> logging.Logger:
    """Initialise the ``product_importer`` logger.

    Safe to call more than once; handlers are only attached the first time.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel((level or settings.LOG_LEVEL).upper())

    # repeated calls (app reloads, tests)
    if root_logger.handlers:
        return root_logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.propagate = False

    root_logger.debug("Logging initialised at level %s", root_logger.level)
    return root_logger
