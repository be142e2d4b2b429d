"""Font processing orchestration for the glyf pipeline.

This module coordinates the full workflow of loading a font, decoding its
glyf table (optionally with a pool of worker processes), flattening
composites, recalculating bounds and saving the result.

Key components:
- decode_glyph_task: Top-level picklable function for parallel decoding
- GlyfProcessor: Main orchestrator class for font processing
"""

import time
import traceback
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from glyfkit.config import ErrorPolicy, GlyfKitSettings
from glyfkit.core.glyph_codec import decode_glyph, encode_glyph
from glyfkit.core.table import GlyfTable, glyph_ranges
from glyfkit.domain import Glyph
from glyfkit.exceptions import DecodeError, FontFormatError
from glyfkit.io import FontReader, FontWriter
from glyfkit.utils import ProcessingLogger, ProcessingStats, configure_logging

ProgressCallback = Callable[[int, int, int, bool], None]


def decode_glyph_task(glyph_index: int, record: bytes) -> dict[str, Any]:
    """Decode a single glyph record.

    Top-level function designed to be picklable for use with
    ProcessPoolExecutor. Each call gets its own copy of the record bytes.

    Args:
        glyph_index: Glyph ID of the record
        record: The glyph's bytes (loca[i]..loca[i + 1])

    Returns:
        Dictionary containing either:
        - Success: {"glyph": glyph_dict, "duration_ms": float}
        - Error: {"error": str, "field": str, "reason": str, "traceback": str,
          "duration_ms": float}
    """
    start_time = time.time()

    try:
        glyph = decode_glyph(record)
    except DecodeError as e:
        return {
            "error": str(e.for_glyph(glyph_index)),
            "field": e.field,
            "reason": e.reason,
            "traceback": traceback.format_exc(),
            "duration_ms": (time.time() - start_time) * 1000,
        }

    return {
        "glyph": glyph.to_dict(),
        "duration_ms": (time.time() - start_time) * 1000,
    }


def is_canonical(record: bytes, encoded: bytes) -> bool:
    """Whether a stored glyph record equals its re-encoding plus padding."""
    padding = record[len(encoded):]
    return record[: len(encoded)] == encoded and len(padding) < 4 and not any(padding)


class GlyfProcessor:
    """Orchestrates glyf table processing.

    Manages the complete workflow:
    1. Load font file
    2. Decode every glyph record (in worker processes when configured)
    3. Flatten nested composites
    4. Recalculate bounding boxes
    5. Save the font with the re-encoded table

    Example:
        settings = GlyfKitSettings()
        processor = GlyfProcessor(settings)
        stats = processor.process(
            font_path=Path("font.ttf"),
            output_path=Path("font-Flat.ttf"),
        )
    """

    def __init__(self, config: GlyfKitSettings) -> None:
        """Initialize the processor with configuration.

        Args:
            config: glyfkit settings containing codec and processing config
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=False,
        )

    def process(
        self,
        font_path: Path,
        output_path: Path | None = None,
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ProcessingStats:
        """Decode, flatten, recalculate and save a font.

        Args:
            font_path: Path to input TrueType font
            output_path: Path for output font (auto-generated if None)
            max_workers: Maximum worker processes (None = config value)
            progress_callback: Optional callback(completed, total, glyph_index, success)
                for progress updates

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            FileNotFoundError: If font file does not exist
            FontFormatError: If the font has no glyf table
            FontSaveError: If the output cannot be written
            DecodeError: If a glyph is malformed and the error policy is RAISE
            KeyboardInterrupt: If processing is cancelled by user
        """
        processing_logger = ProcessingLogger(self.logger)
        stats = processing_logger.stats
        stats.start_time = time.time()

        if output_path is None:
            output_path = FontWriter.get_flat_path(font_path)

        self.logger.info(
            "Starting font processing",
            input=str(font_path),
            output=str(output_path),
        )

        reader = FontReader(font_path)
        reader.load()

        try:
            if not reader.has_outlines:
                raise FontFormatError(str(font_path), "no glyf table")

            self.logger.info(
                "Font loaded",
                format=reader.format,
                glyph_count=reader.glyph_count,
            )

            table = self.decode_table(
                reader.read_glyf_data(),
                reader.read_loca(),
                processing_logger,
                max_workers=max_workers,
                progress_callback=progress_callback,
            )

            processing = self.config.processing
            if processing.flatten or processing.recalc_bounds:
                self.flatten(table, processing_logger)
            if processing.recalc_bounds:
                table.recalc_bounds()

            writer = FontWriter(reader.font, output_path)
            writer.update_table(table)
            writer.save()

            self.logger.info("Font saved", output=str(output_path), glyphs=len(table))

        finally:
            reader.close()

        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            decoded=stats.decoded_count,
            empty=stats.empty_count,
            errors=stats.error_count,
            flattened=stats.flattened_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return stats

    def check(self, font_path: Path) -> tuple[ProcessingStats, list[int]]:
        """Decode and re-encode every glyph of a font without saving.

        Malformed glyphs are counted as errors regardless of the error
        policy, so one bad record does not hide the rest.

        Args:
            font_path: Path to input TrueType font

        Returns:
            Tuple of (stats, indices of glyphs whose bytes change on re-encoding)

        Raises:
            FileNotFoundError: If font file does not exist
            FontFormatError: If the font has no glyf table
        """
        processing_logger = ProcessingLogger(self.logger)
        stats = processing_logger.stats
        stats.start_time = time.time()

        with FontReader(font_path) as reader:
            if not reader.has_outlines:
                raise FontFormatError(str(font_path), "no glyf table")
            data = reader.read_glyf_data()
            loca = reader.read_loca()

        table = self.decode_table(data, loca, processing_logger, on_error=ErrorPolicy.EMPTY)

        noncanonical: list[int] = []
        for index, glyph_range in enumerate(glyph_ranges(loca)):
            if glyph_range is None or index in table.decode_errors:
                continue
            start, end = glyph_range
            record = data[start:end]
            encoded = encode_glyph(table[index])
            if not is_canonical(record, encoded):
                processing_logger.log_glyph_noncanonical(index, len(record), len(encoded))
                noncanonical.append(index)

        stats.end_time = time.time()
        return stats, noncanonical

    def decode_table(
        self,
        data: bytes,
        loca: Sequence[int],
        processing_logger: ProcessingLogger,
        max_workers: int | None = None,
        on_error: ErrorPolicy | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> GlyfTable:
        """Decode a glyf table, in worker processes unless max_workers is 1.

        Args:
            data: Raw glyf table bytes
            loca: numGlyphs + 1 glyph offsets
            processing_logger: Receives per-glyph events
            max_workers: Worker processes (None = config value; 1 = in-process)
            on_error: Error policy (None = config value)
            progress_callback: Optional callback(completed, total, glyph_index, success)

        Returns:
            Decoded table

        Raises:
            DecodeError: If a glyph is malformed and the error policy is RAISE
        """
        if max_workers is None:
            max_workers = self.config.processing.max_workers
        if on_error is None:
            on_error = self.config.codec.on_error

        ranges = glyph_ranges(loca)
        table = GlyfTable(
            [Glyph.empty() for _ in ranges],
            max_component_depth=self.config.codec.max_component_depth,
        )
        tasks: dict[int, bytes] = {}
        for index, glyph_range in enumerate(ranges):
            if glyph_range is None:
                processing_logger.log_glyph_empty(index)
            else:
                start, end = glyph_range
                tasks[index] = data[start:end]

        self.logger.info(
            "Decoding glyphs",
            glyph_count=len(ranges),
            records=len(tasks),
            max_workers=max_workers,
        )

        if max_workers == 1:
            results = ((index, decode_glyph_task(index, record)) for index, record in tasks.items())
            self._collect(results, len(tasks), table, processing_logger, on_error, progress_callback)
        else:
            self._decode_parallel(tasks, table, processing_logger, max_workers, on_error, progress_callback)
        return table

    def _decode_parallel(
        self,
        tasks: dict[int, bytes],
        table: GlyfTable,
        processing_logger: ProcessingLogger,
        max_workers: int | None,
        on_error: ErrorPolicy,
        progress_callback: ProgressCallback | None,
    ) -> None:
        """Decode glyph records using ProcessPoolExecutor."""
        stats = processing_logger.stats
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for index, record in tasks.items():
                future = executor.submit(decode_glyph_task, index, record)
                pending_futures[future] = index

            def results():
                for future in as_completed(pending_futures):
                    index = pending_futures.pop(future)
                    yield index, future.result()

            try:
                self._collect(results(), len(tasks), table, processing_logger, on_error, progress_callback)
            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise
            except DecodeError:
                executor.shutdown(wait=True, cancel_futures=True)
                raise

    def _collect(
        self,
        results: Iterable[tuple[int, dict[str, Any]]],
        total: int,
        table: GlyfTable,
        processing_logger: ProcessingLogger,
        on_error: ErrorPolicy,
        progress_callback: ProgressCallback | None,
    ) -> None:
        """Store decoded glyphs in the table and apply the error policy."""
        completed = 0
        for index, result in results:
            success = "error" not in result
            if success:
                glyph = Glyph.from_dict(result["glyph"])
                table.glyphs[index] = glyph
                processing_logger.log_glyph_decoded(index, _kind(glyph))
            else:
                error = DecodeError(result["field"], result["reason"], index)
                processing_logger.log_glyph_error(index, error, traceback=result.get("traceback"))
                if on_error == ErrorPolicy.RAISE:
                    raise error
                table.decode_errors[index] = error

            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total, index, success)

    def flatten(self, table: GlyfTable, processing_logger: ProcessingLogger) -> list[int]:
        """Flatten nested composites, logging every glyph that changes.

        Returns:
            Indices of the glyphs that changed
        """
        before = [len(glyph.components) for glyph in table]
        changed = table.flatten_components()
        for index in changed:
            processing_logger.log_glyph_flattened(index, before[index], len(table[index].components))
        return changed


def _kind(glyph: Glyph) -> str:
    if glyph.is_composite():
        return "composite"
    if glyph.contours:
        return "simple"
    return "empty"
