"""structlog setup for the library and the command line."""

import sys

import structlog

DEBUG = 10
INFO = 20
WARNING = 30


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog for console output on stderr."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(DEBUG if verbose else INFO),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def quiet_by_default() -> None:
    """Keep library logging off stdout unless the host application set it up.

    structlog's unconfigured default prints every event to stdout, which
    would interleave with rendered maps. Only warnings and errors are kept,
    and they go to stderr. Does nothing once structlog has been configured.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
