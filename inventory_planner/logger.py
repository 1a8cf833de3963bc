import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings

# Libraries whose INFO/DEBUG chatter (connection pools, retries) would bury the report steps.
NOISY_LOGGERS = ("urllib3", "requests")


def setup_logger(
    name: str = "inventory_planner",
    log_level: int | str = settings.LOG_LEVEL,
    log_file: str | None = "planner.log",
) -> logging.Logger:
    """
    Configures the package logger for a CLI run.

    - Console: messages only, at `log_level`, so the pipeline banners read cleanly.
    - File: timestamped records at DEBUG under LOG_DIR, rotated at 5 MB (3 backups).
      Pass log_file=None to log to the console only.

    Only the handlers of this logger are checked, so calling it twice never
    duplicates output while handlers installed elsewhere (root, test capture)
    keep receiving records through propagation.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else log_level)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.LOG_DIR / log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
