"""
Structured logging setup using structlog.
Provides JSON or console output and a watch-specific logging helper.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    log_file: Optional[Union[str, Path]] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Logs go to stderr so stdout stays reserved for console notifications.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call-site information to every event
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger(__name__)
    logger.debug(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class WatchLogger:
    """
    Specialized logger for poll cycles with context management.
    """

    def __init__(self, name: str = "watcher"):
        self.logger = structlog.get_logger(name)
        self.context = {}

    def bind_context(self, **kwargs) -> 'WatchLogger':
        """
        Bind context variables to the logger.

        Args:
            **kwargs: Context variables to bind

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def clear_context(self) -> 'WatchLogger':
        """Clear all context variables."""
        self.context.clear()
        return self

    def log_cycle_start(self, cycle: int, coordinates: int) -> None:
        self.logger.info(
            "Poll cycle started",
            cycle=cycle,
            coordinates=coordinates,
            **self.context
        )

    def log_cycle_complete(
        self,
        cycle: int,
        new_versions: int,
        errors: int,
        duration_seconds: float
    ) -> None:
        self.logger.info(
            "Poll cycle completed",
            cycle=cycle,
            new_versions=new_versions,
            errors=errors,
            duration_seconds=round(duration_seconds, 3),
            **self.context
        )

    def log_versions_fetched(self, coordinate: str, versions: Optional[list]) -> None:
        self.logger.debug(
            "Fetched versions",
            coordinate=coordinate,
            versions=versions,
            **self.context
        )

    def log_fetch_error(self, coordinate: str, error: str) -> None:
        self.logger.error(
            "Fetch failed",
            coordinate=coordinate,
            error=error,
            **self.context
        )

    def log_notification(
        self, coordinate: str, version: str, delivered: bool = True, error: Optional[str] = None
    ) -> None:
        """Log a notification attempt for a new version."""
        if delivered:
            self.logger.info(
                "New version notified",
                coordinate=coordinate,
                version=version,
                delivered=True,
                **self.context
            )
        else:
            self.logger.warning(
                "New version notification failed",
                coordinate=coordinate,
                version=version,
                delivered=False,
                error=error,
                **self.context
            )

    def log_sleep(self, seconds: float) -> None:
        self.logger.debug("Sleeping", seconds=seconds, **self.context)
