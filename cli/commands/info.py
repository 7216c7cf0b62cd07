"""
Info command - show metadata of a decoded A6 update.
"""

from pathlib import Path
from typing import List

import typer
from rich.console import Console

from a6tools.formats.block import IMAGE_MAX_BYTES
from a6tools.formats.reader import UpdateReader
from a6tools.utils.validation import DecodeError
from cli.commands.decode import fail, iter_inputs
from cli.display.hex_view import display_hex_dump
from cli.display.logs import setup_logging
from cli.display.tables import display_image_info

console = Console()


def info(
    files: List[Path] = typer.Argument(..., help="SysEx files, in order"),
    hex: bool = typer.Option(False, "--hex", "-x", help="Show hex dump of the image head"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Treat duplicate blocks as errors"),
    max_size: int = typer.Option(
        IMAGE_MAX_BYTES,
        "--max-size",
        envvar="A6PKG_MAX_SIZE",
        min=0,
        max=IMAGE_MAX_BYTES,
        help="Largest image to accept, in bytes",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show decoder diagnostics"),
) -> None:
    """
    Decode an A6 update and show its version, checksum and size.

    Examples:

        a6pkg info update.syx

        a6pkg info update.syx --hex

        a6pkg info update.syx --json
    """
    setup_logging(verbose)

    reader = UpdateReader(capacity=max_size, strict=strict)
    name = ""
    sources = []

    try:
        for name, buffer in iter_inputs(files):
            sources.append(name)
            reader.feed(buffer)
        image = reader.finish()
    except DecodeError as e:
        fail(name, e, verbose)

    if json_output:
        console.print_json(
            data={
                "sources": sources,
                "kind": image.kind.value if image.kind else None,
                "version": image.version_string,
                "checksum": image.checksum,
                "length": image.length,
                "block_count": image.block_count,
                "frames": reader.frame_count,
                "duplicates": [w.index for w in reader.warnings],
            }
        )
        return

    display_image_info(image, ", ".join(sources), reader.frame_count, reader.warnings)

    if hex:
        display_hex_dump(image.data, title="Image", max_lines=16)
