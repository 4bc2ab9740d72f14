"""Opt-in loguru output for id3kit.

id3kit logs through loguru but stays silent until a caller asks for output:

- loading a file, building a tree and running an experiment are reported at INFO;
- every chosen split and every gradient step are reported at DEBUG;
- the pruning search reports its result and periodic progress on its own
  SEARCH level (25, between INFO and WARNING), and warns when it gives up.

Note:
    Importing this module drops loguru's stock stderr handler (ID 0), so the
    handler added by ``enable_logging()`` is the only route to stderr. A host
    application that already removed handler 0 is left alone.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

SEARCH_LEVEL: Final[str] = "SEARCH"
SEARCH_LEVEL_NUMBER: Final[int] = 25

_FORMATS: Final[dict[str, str]] = {
    "short": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
        "<cyan>{function}</cyan> - "
        "<level>{message}</level> {extra}"
    ),
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level> {extra}"
    ),
}


def _register_search_level() -> None:
    """Add the SEARCH level to loguru, or warn when another number already claims the name."""
    try:
        existing_level = logger.level(SEARCH_LEVEL)
    except ValueError:
        logger.level(SEARCH_LEVEL, no=SEARCH_LEVEL_NUMBER, icon="🔎")
        return
    if existing_level.no != SEARCH_LEVEL_NUMBER:
        warnings.warn(
            f"SEARCH level already registered as {existing_level.no}; pruning-search records keep that number",
            stacklevel=2,
        )


_register_search_level()

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "INFO",
    "SEARCH",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]


class LoggingHandle:
    """One stderr sink for id3kit records, removable on its own.

    Handles can be nested: the CLI opens one per run while a caller may hold
    another. id3kit is only silenced again when the last open handle closes.

    Examples:
        >>> with enable_logging(level="SEARCH"):  # doctest: +SKIP
        ...     report = run_experiment(train, validation, test)
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Track a sink added by `enable_logging`.

        Args:
            handler_id (int): Id returned by `logger.add`.
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's sink; safe to call more than once."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return how many handles still have a sink attached."""
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = "INFO",
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Send id3kit records at or above `level` to stderr.

    Args:
        level (LogLevel): Minimum level shown. "SEARCH" surfaces only the
            pruning-search result, its progress and warnings; "DEBUG" adds one
            line per split chosen by the tree builder.
        log_format (LogFormat): "short" prefixes each record with the function
            name, "full" with module, function and line number.

    Returns:
        LoggingHandle: Handle that removes the sink on `disable()` or on
            leaving a `with` block.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_id3kit_record,
        format=_FORMATS[log_format],
    )
    return LoggingHandle(handler_id)


def _is_id3kit_record(record: Record) -> bool:
    """Return True for records emitted from an id3kit module.

    Args:
        record (Record): Record offered to the sink.

    Returns:
        bool: Whether the record's module name starts with the package name.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
