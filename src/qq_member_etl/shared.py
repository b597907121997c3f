"""qq_member_etl.shared

Shared utilities used by the mapper and the CLI driver.
Includes the exception hierarchy, RunCounters, and logging setup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

PACKAGE_LOGGER = "qq_member_etl"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MemberExtractError(Exception):
    """Base class for every error raised while extracting members."""


class NotFoundError(MemberExtractError):
    """Raised when an expected table or nested element is absent."""


class MissingFieldError(MemberExtractError):
    """Raised when a row has no cell at a required position."""

    def __init__(self, header: str, row_index: int) -> None:
        super().__init__(
            f"Failed to get value for header `{header}`, at row `{row_index}`"
        )
        self.header = header
        self.row_index = row_index


class UnrecognizedGenderError(MemberExtractError):
    """Raised when a gender cell holds none of the known tokens."""

    def __init__(self, value: str, row_index: int) -> None:
        super().__init__(f"Unrecognized gender {value!r} at row `{row_index}`")
        self.value = value
        self.row_index = row_index


class ConversionError(MemberExtractError):
    """Raised when converting one input file fails; wraps the cause."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message}: {str(path)!r}")
        self.path = path


# ---------------------------------------------------------------------------
# RunCounters
# ---------------------------------------------------------------------------

@dataclass
class RunCounters:
    files_converted: int = 0
    files_overwritten: int = 0
    members_written: int = 0


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def verbosity_to_level(verbose: int, quiet: int) -> int:
    """Map -v/-q counts to a logging level.

    No flags logs errors only; each -v steps down one level (WARNING, INFO,
    DEBUG) and any -q turns logging off.
    """
    if quiet > 0:
        return logging.CRITICAL + 1
    levels = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]
    return levels[min(verbose, len(levels) - 1)]


def setup_logging(level: int) -> logging.Logger:
    """Attach a console handler to the package logger only."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
