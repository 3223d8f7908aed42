import logging
import os
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Optional

import bittensor as bt

if TYPE_CHECKING:
    from tepbot.performers.pr_notifier import ReconcilerEvent

EVENTS_LEVEL_NUM = 38
EVENTS_LOGGER_NAME = 'tepbot.event'
DEFAULT_LOG_BACKUP_COUNT = 10
DEFAULT_EVENTS_RETENTION_SIZE = 2 * 1024 * 1024


def setup_events_logger(full_path: str, events_retention_size: int = DEFAULT_EVENTS_RETENTION_SIZE) -> logging.Logger:
    """Attach a rotating events.log under ``full_path`` to the events logger."""
    logging.addLevelName(EVENTS_LEVEL_NUM, 'EVENT')

    logger = logging.getLogger(EVENTS_LOGGER_NAME)
    logger.setLevel(EVENTS_LEVEL_NUM)
    logger.propagate = False

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    os.makedirs(full_path, exist_ok=True)
    log_file = os.path.abspath(os.path.join(full_path, 'events.log'))
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_file:
            return logger

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=events_retention_size,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(EVENTS_LEVEL_NUM)
    logger.addHandler(file_handler)

    return logger


def log_event(event: Optional['ReconcilerEvent'], subject: str = '') -> None:
    """Log a performer event to the console log and, if configured, to events.log."""
    if event is None:
        return

    subject_str = f'{subject} | ' if subject else ''
    line = f'{subject_str}{event.event_type} | {event.reason} | {event.message}'

    if event.is_warning:
        bt.logging.warning(line)
    else:
        bt.logging.info(line)

    events_logger = logging.getLogger(EVENTS_LOGGER_NAME)
    if events_logger.handlers:
        events_logger.log(EVENTS_LEVEL_NUM, line)
