import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from untrivially.core.config import settings


def get_logger(name: str, log_level: str = None) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(log_level or settings.LOG_LEVEL)
    logger.propagate = False

    formatter = JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(message)s"
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger
