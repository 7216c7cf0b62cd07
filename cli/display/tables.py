"""
Rich table displays for update images and SysEx frames.
"""

from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from a6tools.formats.assembler import Image
from a6tools.formats.block import BLOCK_7BIT_LEN, BLOCK_LEN, BlockHeader
from a6tools.formats.sysex_parser import SysExFrame, opcode_name
from a6tools.utils.validation import DecodeError

console = Console()


def display_image_info(
    image: Image,
    source: str,
    frame_count: int,
    warnings: Sequence[DecodeError] = (),
) -> None:
    """Display metadata of a decoded update image."""
    lines = [f"[bold]Source:[/bold] {source}"]
    lines.extend(f"[bold]{label}:[/bold] {value}" for label, value in image.metadata())
    lines.append(f"[bold]Frames:[/bold] {frame_count}")

    if warnings:
        lines.append(f"[bold]Status:[/bold] [yellow]Valid ({len(warnings)} duplicate blocks)[/yellow]")
    else:
        lines.append("[bold]Status:[/bold] [green]Valid[/green]")

    console.print(
        Panel(
            "\n".join(lines),
            title="[bold blue]A6 Update Image[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )


def display_frames(frames: List[SysExFrame]) -> None:
    """Display a table of SysEx frames and their block headers."""
    table = Table(
        title=f"SysEx Frames ({len(frames)})",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", style="dim")
    table.add_column("Offset", style="cyan")
    table.add_column("Opcode")
    table.add_column("Packed", justify="right")
    table.add_column("Unpacked", justify="right")
    table.add_column("Block")
    table.add_column("Version")

    for i, frame in enumerate(frames):
        decoded = frame.decoded
        packed = str(len(frame.payload))
        if len(frame.payload) != BLOCK_7BIT_LEN:
            packed = f"[yellow]{packed}[/yellow]"
        block = "[dim]-[/dim]"
        version = "[dim]-[/dim]"

        if len(decoded) == BLOCK_LEN:
            header = BlockHeader.unpack(decoded)
            block = f"{header.block_index}/{header.block_count}"
            version = header.version_string

        table.add_row(
            str(i),
            f"0x{frame.offset:06X}",
            f"{opcode_name(frame.opcode)} ({frame.opcode:02X})",
            packed,
            str(len(decoded)),
            block,
            version,
        )

    console.print(table)
