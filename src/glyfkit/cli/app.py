"""CLI application entry point for glyfkit.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from glyfkit import __version__
from glyfkit.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_cancellation_summary,
    print_check_result,
    print_error,
    print_font_info,
    print_glyph_kinds,
    print_header,
    print_processing_info,
    print_statistics,
    print_step,
    print_success,
    print_variations,
)
from glyfkit.config import (
    CodecConfig,
    ErrorPolicy,
    GlyfKitSettings,
    LoggingConfig,
    ProcessingConfig,
)
from glyfkit.core import GlyfProcessor
from glyfkit.exceptions import FontLoadError, FontSaveError, GlyfKitError
from glyfkit.io import FontReader, FontWriter

app = typer.Typer(
    name="glyfkit",
    help="Decode, check and flatten the glyf table of TrueType fonts.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]glyfkit[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Decode, check and flatten the glyf table of TrueType fonts."""


def _validate_input(input_font: Path) -> None:
    if not input_font.exists():
        print_error(
            f"Input file not found: {input_font}",
            details=f"The file '{input_font}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_font.is_file():
        print_error(
            f"Input path is not a file: {input_font}",
            details="Please provide a path to a TrueType font file.",
        )
        raise typer.Exit(code=1)


def _parse_policy(on_error: str) -> ErrorPolicy:
    try:
        return ErrorPolicy(on_error.lower())
    except ValueError:
        print_error(
            f"Invalid error policy: {on_error}",
            details="Valid values: raise, empty",
        )
        raise typer.Exit(code=1)


InputFont = Annotated[
    Path,
    typer.Argument(
        help="Path to input TrueType font file",
        show_default=False,
    ),
]

OnError = Annotated[
    str,
    typer.Option(
        "--on-error",
        help="What to do with a malformed glyph (raise|empty)",
    ),
]

LogFile = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write detailed logs to file",
    ),
]


@app.command()
def info(
    input_font: InputFont,
    on_error: OnError = "raise",
) -> None:
    """Show glyph counts, maxp statistics and variation summary of a font.

    Example:
        glyfkit info Roboto-Regular.ttf
    """
    _validate_input(input_font)
    policy = _parse_policy(on_error)

    try:
        try:
            reader = FontReader(input_font)
            reader.load()
        except Exception as e:
            raise FontLoadError(str(input_font), str(e)) from e

        try:
            print_font_info(
                font_path=str(input_font),
                font_type=reader.format,
                glyph_count=reader.glyph_count,
                upm=reader.units_per_em,
            )
            if not reader.has_outlines:
                console.print("\n  No glyf table.")
                raise typer.Exit(code=0)

            table = reader.read_table(on_error=policy)
            gvar = reader.read_gvar()
        finally:
            reader.close()

        composite = sum(1 for glyph in table if glyph.is_composite())
        empty = sum(1 for glyph in table if glyph.is_empty())
        print_glyph_kinds(len(table) - composite - empty, composite, empty)

        print_step("maxp statistics")
        print_statistics(table.maxp_statistics())

        if gvar is not None:
            print_step("Variations")
            print_variations(gvar)

        if table.decode_errors:
            console.print(f"\n  [red]{len(table.decode_errors)}[/red] glyphs failed to decode")

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyfKitError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def check(
    input_font: InputFont,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Also fail when a glyph re-encodes to different bytes",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="List every failing glyph",
        ),
    ] = False,
    log_file: LogFile = None,
) -> None:
    """Decode and re-encode every glyph, reporting glyphs that fail or differ.

    Glyphs that re-encode to different bytes are valid but were not written
    in canonical form (e.g. unoptimized flags or word-sized deltas).

    Example:
        glyfkit check Roboto-Regular.ttf
    """
    _validate_input(input_font)

    settings = GlyfKitSettings(logging=LoggingConfig(log_file=log_file))
    processor = GlyfProcessor(settings)

    try:
        stats, noncanonical = processor.check(input_font)
    except FileNotFoundError as e:
        print_error(f"Could not load font: {e}")
        raise typer.Exit(code=1)
    except GlyfKitError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    print_check_result(stats.glyph_count, noncanonical, stats.errors, verbose)

    if stats.errors or (strict and noncanonical):
        raise typer.Exit(code=1)


@app.command()
def flatten(
    input_font: InputFont,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}-Flat.{ext})",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel decoding workers (default: 1)",
            min=1,
        ),
    ] = None,
    on_error: OnError = "raise",
    max_depth: Annotated[
        int,
        typer.Option(
            "--max-depth",
            help="Composite nesting depth treated as a reference loop",
            min=1,
            max=1024,
        ),
    ] = 64,
    log_file: LogFile = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Flatten nested composite glyphs and recalculate all bounding boxes.

    Example:
        glyfkit flatten Roboto-Regular.ttf

    This will create Roboto-Regular-Flat.ttf in which every composite glyph
    refers only to simple glyphs.
    """
    _validate_input(input_font)
    policy = _parse_policy(on_error)

    if not quiet:
        print_header(__version__)

    settings = GlyfKitSettings(
        codec=CodecConfig(max_component_depth=max_depth, on_error=policy),
        processing=ProcessingConfig(max_workers=workers or 1),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )

    output_path = output if output is not None else FontWriter.get_flat_path(input_font)
    processor = GlyfProcessor(settings)
    stats = None

    try:
        if not quiet:
            print_step("Processing")
            print_processing_info(workers or 1)

            with create_progress() as progress:
                task_id = progress.add_task("Decoding glyphs", total=None)

                def update_progress(completed: int, total: int, *_: object) -> None:
                    progress.update(task_id, completed=completed, total=total)

                stats = processor.process(
                    font_path=input_font,
                    output_path=output_path,
                    progress_callback=update_progress,
                )
        else:
            stats = processor.process(font_path=input_font, output_path=output_path)
    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            print_cancellation_summary(
                decoded=stats.decoded_count if stats else 0,
                cancelled=stats.cancelled_count if stats else 0,
            )
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code
    except FileNotFoundError as e:
        print_error(f"Could not load font: {e}")
        raise typer.Exit(code=1)
    except FontSaveError as e:
        print_error(f"Could not save font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyfKitError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)

    if not quiet:
        print_success(
            output_path=str(output_path),
            file_size=_format_file_size(output_path),
            total_time_s=stats.duration_seconds,
            decoded=stats.decoded_count,
            flattened=stats.flattened_count,
            errors=stats.error_count,
        )


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
