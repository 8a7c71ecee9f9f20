"""Logging for the Koord analyzer.

Modules log through `get_logger(__name__)`. Nothing is emitted until the
embedding tool calls `init_logging`, which routes the `koord` loggers to a file
and, when verbose, to the console.
"""

from logging import (
    DEBUG,
    INFO,
    FileHandler,
    Formatter,
    Logger,
    StreamHandler,
    getLogger,
)

PACKAGE_LOGGER = "koord"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def init_logging(*, verbose: bool = False, filename: str = "koord.log") -> Logger:
    """Send analyzer log records to a file, and to stderr when verbose.

    Handlers from an earlier call are closed and replaced.

    Args:
        verbose: Log at DEBUG level and echo records to the console.
        filename: File the records are written to. It is truncated first.

    Returns:
        The package logger that was configured.

    """
    package_logger = getLogger(PACKAGE_LOGGER)
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()  # Reconfiguring replaces earlier handlers
    package_logger.setLevel(DEBUG if verbose else INFO)

    file_handler = FileHandler(filename, mode="w")
    file_handler.setFormatter(Formatter(FILE_FORMAT))
    package_logger.addHandler(file_handler)

    if verbose:
        console = StreamHandler()
        console.setFormatter(Formatter(CONSOLE_FORMAT))
        package_logger.addHandler(console)
        package_logger.debug("Debug logging enabled.")

    return package_logger


def get_logger(name: str) -> Logger:
    """Get the logger of a Koord module."""
    return getLogger(name)
