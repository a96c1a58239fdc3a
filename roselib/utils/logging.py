"""Logging configuration for rose-conv.

Each run writes a full DEBUG log for its subcommand to ``log_dir`` while the
console only shows INFO and above unless ``verbose`` is set. Warnings are
counted so the CLI can report how many conversions fell back to a default.
"""
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Union

FILE_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'

# Handlers installed by setup_logging, so a second run replaces only its own
_installed: List[logging.Handler] = []


class WarningCounter(logging.Handler):
    """Counts WARNING and higher records per logger."""

    def __init__(self):
        super().__init__(logging.WARNING)
        self.counts = {}

    def emit(self, record: logging.LogRecord) -> None:
        self.counts[record.name] = self.counts.get(record.name, 0) + 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())


@dataclass
class LoggingSession:
    log_file: Path
    warnings: WarningCounter


def shutdown_logging() -> None:
    """Remove and close the handlers installed by ``setup_logging``."""
    root_logger = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(log_dir: Union[str, Path], command: str = 'run',
                  verbose: bool = False) -> LoggingSession:
    """Setup logging for one rose-conv command.

    Args:
        log_dir: Directory to store log files
        command: Subcommand name, used in the log file name
        verbose: Show DEBUG records on the console

    The log file always receives DEBUG records.
    """
    shutdown_logging()

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_path / f'rose_conv_{command.replace("-", "_")}_{timestamp}.log'
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    counter = WarningCounter()

    for handler in (file_handler, console_handler, counter):
        root_logger.addHandler(handler)
        _installed.append(handler)

    root_logger.debug(f"Log file: {log_file}")
    return LoggingSession(log_file=log_file, warnings=counter)
