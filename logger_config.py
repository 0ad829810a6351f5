"""Logging setup shared by the API server, MCP server and reminder worker.

Each module gets a named logger that writes to its own rotating file under
LOG_DIR (dispatcher.log, advisory.log, api.log, ...) and to the console.
The level comes from LOG_LEVEL so a deployment can turn on DEBUG for the
worker's per-iteration messages without code changes.
"""

import logging
from logging.handlers import RotatingFileHandler
import os

from config import settings

LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
os.makedirs(LOG_DIR, exist_ok=True)

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s - %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

NOISY_LOGGERS = ('uvicorn', 'uvicorn.access', 'fastapi', 'sqlalchemy', 'httpx', 'httpcore', 'mcp')


def setup_logger(name: str, log_file: str = 'service.log') -> logging.Logger:
    """Return the logger for a service module, attaching handlers on first use.

    Args:
        name: Logger name (usually __name__)
        log_file: File under LOG_DIR this module writes to

    Returns:
        logging.Logger writing to the rotating file and the console
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, log_file),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8'
    )
    console_handler = logging.StreamHandler()
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def quiet_third_party_loggers():
    """Keep library chatter at WARNING so service logs stay readable."""
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


quiet_third_party_loggers()
