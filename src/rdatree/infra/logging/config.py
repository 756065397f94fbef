from __future__ import annotations

"""
Logging Configuration Models.

Severity mapping, record formats and the settings dataclass consumed by
`configure_logging`. File records carry the thread name because payloads
are decoded on pool threads.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

CONSOLE_FORMAT = "%(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotated log segments kept next to the active file
BACKUP_COUNT = 3


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for one `configure_logging` call.

    Attributes:
        level: Minimum severity level name.
        console: Send records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size at which the log file is rotated.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 2 * 1024 * 1024

    @classmethod
    def for_cli(cls, debug: bool, log_file: Optional[str] = None) -> LoggingConfig:
        """Settings used by the command line: DEBUG when requested, else INFO."""
        return cls(level="DEBUG" if debug else "INFO", console=True, log_file=log_file)
