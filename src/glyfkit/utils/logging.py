"""Logging utilities for glyfkit."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class ProcessingStats:
    """Statistics from a processing run."""

    decoded_count: int = 0
    empty_count: int = 0
    error_count: int = 0
    flattened_count: int = 0
    noncanonical_count: int = 0
    cancelled_count: int = 0
    was_cancelled: bool = False
    errors: list[tuple[int, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def glyph_count(self) -> int:
        """Total glyph records seen, including failures."""
        return self.decoded_count + self.empty_count + self.error_count

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("glyfkit")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class ProcessingLogger:
    """Logger for tracking per-glyph decoding events and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_glyph_decoded(self, glyph_index: int, kind: str) -> None:
        """Log a successfully decoded glyph."""
        self._logger.debug("Glyph decoded", glyph=glyph_index, kind=kind)
        self._stats.decoded_count += 1

    def log_glyph_empty(self, glyph_index: int) -> None:
        """Log a glyph without outline data."""
        self._logger.debug("Glyph empty", glyph=glyph_index)
        self._stats.empty_count += 1

    def log_glyph_error(
        self,
        glyph_index: int,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log glyph decoding error."""
        self._logger.error(
            "Glyph decoding failed",
            glyph=glyph_index,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((glyph_index, str(error)))

    def log_glyph_flattened(
        self,
        glyph_index: int,
        before: int,
        after: int,
    ) -> None:
        """Log a composite glyph whose component list was flattened."""
        self._logger.debug(
            "Glyph flattened",
            glyph=glyph_index,
            components_before=before,
            components_after=after,
        )
        self._stats.flattened_count += 1

    def log_glyph_noncanonical(self, glyph_index: int, stored: int, encoded: int) -> None:
        """Log a glyph whose re-encoded record differs from the stored one."""
        self._logger.info(
            "Glyph re-encodes differently",
            glyph=glyph_index,
            stored_bytes=stored,
            encoded_bytes=encoded,
        )
        self._stats.noncanonical_count += 1

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
