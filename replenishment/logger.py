import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings

LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def setup_logger(name: str = None, log_level: int | str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Configures a logger for engine runs: progress lines on stdout,
    timestamped records in a rotating file under LOG_DIR.
    Calling it again for an already configured logger is a no-op.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    # stdout carries the pipeline's status lines as-is
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(stdout_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    run_log = RotatingFileHandler(
        settings.LOG_DIR / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    run_log.setLevel(log_level)
    run_log.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(run_log)

    return logger
