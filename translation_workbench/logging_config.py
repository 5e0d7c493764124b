import logging
import os
import sys
from typing import Optional

from tqdm import tqdm

PACKAGE_LOGGER_NAME = "translation_workbench"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class TqdmLoggingHandler(logging.Handler):
    """Console handler that writes through ``tqdm.write`` so progress bars stay intact."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def setup_logger(log_level_str: str = 'INFO', log_file_path: Optional[str] = None,
                 log_to_console: bool = True) -> logging.Logger:
    """
    Configure the package logger.

    Every module logs through ``logging.getLogger(__name__)``, so configuring the
    package logger covers the whole workbench. Calling this again replaces the
    previous handlers.

    Args:
        log_level_str: Level name such as 'INFO' or 'DEBUG'; unknown names mean INFO.
        log_file_path: Log file to append to. No file handler when empty.
        log_to_console: Whether to add the tqdm-aware console handler.

    Returns:
        The configured ``translation_workbench`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level_str.upper(), logging.INFO))

    if logger.hasHandlers():
        logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = TqdmLoggingHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
