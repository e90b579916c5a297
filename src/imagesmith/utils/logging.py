"""Logging utilities for imagesmith."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]


_installed_handlers: list[logging.Handler] = []


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger that writes through the stdlib logger ``name``.

    Unlike ``structlog.get_logger`` this does not depend on global structlog
    configuration: events go to whatever handlers ``configure_logging`` (or the
    application) attached, and are dropped below the logger's level.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


@dataclass
class OperationStats:
    """Statistics from an editing session."""

    operation_count: int = 0
    error_count: int = 0
    surfaces_replaced: int = 0
    durations_ms: dict[str, float] = field(default_factory=dict)
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Seconds between editor creation and its last operation."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Attach console and optional file handlers and configure structlog.

    Args:
        log_file: Destination for JSON log lines; None disables file output
        console_level: Threshold for the stderr handler
        file_level: Threshold for the file handler
        quiet: Skip the console handler entirely

    Returns:
        The "imagesmith" structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Reconfiguring replaces the handlers from the previous call
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)
        _installed_handlers.append(console_handler)

    structlog.configure(
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("imagesmith")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class OperationLogger:
    """Logger for tracking editor operations and their timing."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = OperationStats(start_time=time.time())
        self._pending: dict[str, float] = {}

    def log_operation_start(self, operation: str, **details: object) -> None:
        """Log start of an editor operation."""
        self._pending[operation] = time.perf_counter()
        self._logger.debug("Operation started", operation=operation, **details)

    def log_operation_complete(self, operation: str, width: int, height: int) -> None:
        """Log successful operation with the resulting geometry."""
        started = self._pending.pop(operation, None)
        duration_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        self._logger.info(
            "Operation complete",
            operation=operation,
            width=width,
            height=height,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.operation_count += 1
        self._stats.durations_ms[operation] = (
            self._stats.durations_ms.get(operation, 0.0) + duration_ms
        )
        self._stats.end_time = time.time()

    def log_operation_error(self, operation: str, error: Exception) -> None:
        """Log failed operation."""
        self._pending.pop(operation, None)
        self._logger.error(
            "Operation failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._stats.error_count += 1
        self._stats.errors.append((operation, str(error)))
        self._stats.end_time = time.time()

    def log_surface_replaced(self, operation: str, old: tuple[int, int], new: tuple[int, int]) -> None:
        """Log a surface swap."""
        self._logger.debug(
            "Surface replaced",
            operation=operation,
            old_size=f"{old[0]}x{old[1]}",
            new_size=f"{new[0]}x{new[1]}",
        )
        self._stats.surfaces_replaced += 1

    @property
    def stats(self) -> OperationStats:
        """Get current session statistics."""
        return self._stats
