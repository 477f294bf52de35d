import logging
import os
from datetime import datetime
from typing import Optional

from stockdata.config.env import get_log_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Setup a logger with a console handler and, when a log directory is
    configured, a dated file handler.

    Args:
        name: Logger name (usually __name__)
        log_dir: Directory for log files (default: LOG_DIR env, console only if unset)
        level: Logging level name (default: LOG_LEVEL env)

    Returns:
        Configured logger instance
    """
    cfg = get_log_config()
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(level or cfg.level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_dir = log_dir or cfg.log_dir
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        module_name = name.split(".")[-1]
        log_filename = f"{module_name}_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
