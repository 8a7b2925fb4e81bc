"""Centralized logging with a rotating file handler."""
import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "complaints"


def init_logging(settings) -> logging.Logger:
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # create_app may run more than once per process (tests, reloads)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    log_path = None
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_path = os.path.join(settings.LOG_DIR, "app.log")
        file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.info("Logging initialized (file=%s)", log_path)
    return logger


def get_logger(area: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{area}")
