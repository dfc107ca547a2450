import json
import logging
import os
import sys
import time

from strongbox import config


ROOT_LOGGER = "strongbox"


def _configure(level, to_file):
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name=ROOT_LOGGER, level=None, to_file=None):
    """
    Structured JSON logger for Strongbox components.

    Handlers live on the package logger; module loggers (strongbox.gate,
    strongbox.viewing_key, ...) propagate to it.
    """
    _configure(level or config.LOG_LEVEL, to_file or config.LOG_FILE)
    return logging.getLogger(name)
