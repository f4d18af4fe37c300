"""Environment and utility functions."""

import logging
import sys

from ..config import LOG_FORMAT, LOG_DATE_FORMAT

# Default log file location
DEFAULT_LOG_FILE = "land_measure.log"


def setup_logging(level: int = logging.INFO, log_file: str | None = DEFAULT_LOG_FILE) -> None:
    """Set up logging configuration.
    
    Logs are written to both console (stderr) and a file.
    
    Args:
        level: Logging level
        log_file: Path to log file (None to disable file logging)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            handlers.append(file_handler)
        except OSError as e:
            # Console-only if the file can't be opened
            print(f"Warning: Could not open log file '{log_file}': {e}", file=sys.stderr)
    
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True  # Replace any existing handlers
    )
    
    # Third-party loggers are noisy at DEBUG
    for name in ("PIL",):
        logging.getLogger(name).setLevel(max(level, logging.INFO))
