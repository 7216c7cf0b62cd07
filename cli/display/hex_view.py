"""
Hex dump display utilities.
"""

from rich.console import Console
from rich.panel import Panel

from a6tools.formats.block import BLOCK_DATA_LEN

console = Console()


def display_hex_dump(
    data: bytes,
    title: str = "Hex Dump",
    start_offset: int = 0,
    bytes_per_line: int = 16,
    max_lines: int = 32,
) -> None:
    """Display formatted hex dump with Rich, marking block boundaries."""

    lines = []
    end = min(len(data), max_lines * bytes_per_line)

    for offset in range(0, end, bytes_per_line):
        chunk = data[offset : offset + bytes_per_line]

        # Hex part
        hex_parts = []
        for i, b in enumerate(chunk):
            if i == 8:
                hex_parts.append(" ")  # Extra space at midpoint
            hex_parts.append(f"{b:02X}")
        hex_str = " ".join(hex_parts)

        # ASCII part
        ascii_str = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)

        addr = start_offset + offset
        block_mark = (
            f"[magenta]#{addr // BLOCK_DATA_LEN:<4d}[/magenta]"
            if addr % BLOCK_DATA_LEN == 0
            else "     "
        )

        lines.append(
            f"{block_mark} [dim]{addr:08X}[/dim]  {hex_str:<{bytes_per_line * 3 + 2}}"
            f"  [cyan]{ascii_str}[/cyan]"
        )

    if len(data) > end:
        remaining = len(data) - end
        lines.append(f"[dim]... {remaining} more bytes ...[/dim]")

    content = "\n".join(lines)
    console.print(Panel(content, title=title, border_style="blue", expand=False))
