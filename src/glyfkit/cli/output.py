"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from glyfkit.core.gvar import GvarTable
from glyfkit.core.table import MaxpStatistics

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info

MAX_LISTED_GLYPHS = 20


def create_progress() -> Progress:
    """Create a rich progress bar for glyph decoding.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]glyfkit[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_font_info(font_path: str, font_type: str, glyph_count: int, upm: int) -> None:
    """Print font information.

    Args:
        font_path: Path to the font file
        font_type: Font format type (e.g., "TrueType", "OpenType")
        glyph_count: Total number of glyphs in font
        upm: Units per em value
    """
    # Use Text to safely handle paths with special characters
    line1 = Text("  ")
    line1.append(font_path)
    line1.append(f" ({font_type})")
    console.print(line1)
    console.print(f"  {glyph_count:,} glyphs {SYM_DOT} {upm:,} UPM")


def print_glyph_kinds(simple: int, composite: int, empty: int) -> None:
    """Print how many glyphs of each kind the table holds."""
    console.print(
        f"  {simple:,} simple {SYM_DOT} {composite:,} composite {SYM_DOT} {empty:,} empty"
    )


def print_statistics(statistics: MaxpStatistics) -> None:
    """Print maxp statistics as a two-column table.

    Args:
        statistics: Values computed from the glyf table
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(justify="right")
    for name, value in statistics._asdict().items():
        table.add_row(name.replace("_", " ").capitalize(), f"{value:,}")
    console.print(table)


def print_variations(gvar: GvarTable) -> None:
    """Print a summary of the gvar table.

    Args:
        gvar: Decoded gvar table
    """
    varied = [v for v in gvar.glyph_variations if v is not None]
    tuples = sum(len(v.variations) for v in varied)
    console.print(
        f"  gvar {gvar.major_version}.{gvar.minor_version} {SYM_DOT} "
        f"{gvar.axis_count} axes {SYM_DOT} {len(gvar.shared_tuples)} shared tuples"
    )
    console.print(f"  {len(varied):,} glyphs with variations {SYM_DOT} {tuples:,} tuple variations")


def _format_indices(indices: list[int]) -> str:
    text = ", ".join(str(i) for i in indices[:MAX_LISTED_GLYPHS])
    if len(indices) > MAX_LISTED_GLYPHS:
        text += f" {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(indices) - MAX_LISTED_GLYPHS} more)"
    return text


def print_check_result(
    glyph_count: int,
    noncanonical: list[int],
    errors: list[tuple[int, str]],
    verbose: bool,
) -> None:
    """Print the outcome of a decode and re-encode check.

    Args:
        glyph_count: Number of glyphs checked
        noncanonical: Indices of glyphs whose bytes change on re-encoding
        errors: (glyph index, message) for glyphs that failed to decode
        verbose: Whether to list every failing glyph
    """
    if not noncanonical and not errors:
        console.print(f"\n[bold green]{SYM_OK} {glyph_count:,} glyphs re-encode identically[/bold green]")
        return

    console.print(f"\n[bold]{glyph_count:,} glyphs checked[/bold]")
    if noncanonical:
        console.print(f"  [yellow]{len(noncanonical)}[/yellow] glyphs re-encode differently")
        console.print(f"  {_format_indices(noncanonical)}")
    if errors:
        console.print(f"  [red]{len(errors)}[/red] glyphs failed to decode")
        shown = errors if verbose else errors[:MAX_LISTED_GLYPHS]
        for glyph_index, message in shown:
            console.print(f"  {SYM_ERR} {glyph_index}: {message}")
        if len(shown) < len(errors):
            console.print(f"  {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(errors) - len(shown)} more)")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    decoded: int,
    flattened: int,
    errors: int,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        decoded: Number of glyph records decoded
        flattened: Number of composite glyphs flattened
        errors: Number of glyphs that failed to decode
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {decoded} glyphs {SYM_DOT} {flattened} flattened {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress glyphs")


def print_cancellation_summary(decoded: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        decoded: Number of glyphs decoded before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {decoded} glyphs decoded {SYM_DOT} {cancelled} tasks cancelled")
    console.print("  No output file created")
