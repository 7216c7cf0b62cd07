"""
Frames command - list the A6 SysEx frames in a capture.
"""

from pathlib import Path

import typer
from rich.console import Console

from a6tools.formats.sysex_parser import ALL_OPCODES, FrameExtractor
from cli.display.logs import setup_logging
from cli.display.tables import display_frames

console = Console()


def frames(
    file: Path = typer.Argument(..., help="SysEx file to scan"),
    all_opcodes: bool = typer.Option(
        False, "--all-opcodes", "-a", help="Include program, mix and global data frames"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report skipped bytes"),
) -> None:
    """
    List A6 SysEx frames with their offsets and block headers.

    Examples:

        a6pkg frames update.syx

        a6pkg frames programs.syx --all-opcodes
    """
    setup_logging(verbose)

    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    extractor = FrameExtractor(ALL_OPCODES if all_opcodes else None)
    found = list(extractor.extract(file.read_bytes()))

    if not found:
        console.print(f"[yellow]No A6 SysEx frames found in {file}[/yellow]", highlight=False)
        return

    display_frames(found)
