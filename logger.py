# logger.py - Centralized logging configuration
import os
import logging
from logging.handlers import RotatingFileHandler

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "1048576"))
LOG_BACKUP_COUNT = 10

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]"
CONSOLE_FORMAT = "%(name)s - %(levelname)s - %(message)s"


def setup_logger(name, log_file=None, level=logging.INFO):
    """
    Named logger writing to logs/<name>.log with rotation, plus the console
    outside production. Loggers of submodules (``name.something``) share
    these handlers through propagation.
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    log_file = log_file or os.path.join(LOG_DIR, f"{name}.log")

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    file_handler = RotatingFileHandler(log_file, maxBytes=LOG_MAX_BYTES,
                                       backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    file_handler.setLevel(level)
    logger.addHandler(file_handler)

    if os.environ.get("FLASK_ENV") != "production":
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def setup_logging(app):
    """Route Flask's own logger and the blueprint module loggers into app.log."""
    level = logging.DEBUG if app.debug else logging.INFO
    for logger in (app.logger, logging.getLogger("blueprints")):
        logger.setLevel(level)
        for handler in app_logger.handlers:
            if handler not in logger.handlers:
                logger.addHandler(handler)
        logger.propagate = False


# Global loggers. "referral" is also the parent of every referral.* module logger.
app_logger = setup_logger("app")
referral_logger = setup_logger("referral")
payments_logger = setup_logger("payments")
