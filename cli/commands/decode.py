"""
Decode command - convert A6 SysEx updates to binary images.
"""

from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Tuple

import typer

from a6tools.formats.assembler import Image
from a6tools.formats.block import IMAGE_MAX_BYTES
from a6tools.formats.reader import UpdateReader
from a6tools.utils.validation import DecodeError
from cli.display.logs import err_console as console
from cli.display.logs import setup_logging

STDIN_NAME = "-"


def iter_inputs(files: Optional[List[Path]]) -> Iterator[Tuple[str, bytes]]:
    """
    Yield ``(name, data)`` for each input file, or for stdin if none.

    Exits with status 1 if a file does not exist.
    """
    if not files:
        yield STDIN_NAME, typer.get_binary_stream("stdin").read()
        return

    for path in files:
        if str(path) == STDIN_NAME:
            yield STDIN_NAME, typer.get_binary_stream("stdin").read()
            continue
        if not path.exists():
            console.print(f"[red]Error: File not found: {path}[/red]")
            raise typer.Exit(1)
        yield str(path), path.read_bytes()


def write_result(stream: BinaryIO, image: Optional[Image], data: bytes) -> None:
    """Write the decoded image, or the raw blocks when there is no image."""
    if image is not None:
        image.write_to(stream)
    else:
        stream.write(data)


def fail(name: str, error: Exception, verbose: bool) -> None:
    """Report a decode error for input ``name`` and exit."""
    console.print(f"[red]{name}: {error}[/red]", highlight=False)
    if verbose:
        console.print_exception()
    raise typer.Exit(1)


def decode(
    files: Optional[List[Path]] = typer.Argument(
        None, help="SysEx files, in order (default: stdin)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file path (default: stdout)"
    ),
    blocks: bool = typer.Option(
        False, "--blocks", help="Write unpacked blocks instead of the assembled image"
    ),
    strict: bool = typer.Option(
        False, "--strict", "-s", help="Treat duplicate blocks as errors"
    ),
    max_size: int = typer.Option(
        IMAGE_MAX_BYTES,
        "--max-size",
        envvar="A6PKG_MAX_SIZE",
        min=0,
        max=IMAGE_MAX_BYTES,
        help="Largest image to accept, in bytes",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress"),
) -> None:
    """
    Convert A6 SysEx update files to a binary image.

    All files are treated as one capture, in the order given. Frames must
    all carry the same opcode (OS or bootloader update).

    Examples:

        a6pkg decode update.syx -o os.bin

        a6pkg decode part1.syx part2.syx > os.bin

        a6pkg decode update.syx --blocks -o blocks.bin
    """
    setup_logging(verbose)

    reader = UpdateReader(capacity=max_size, strict=strict)
    name = STDIN_NAME
    image = None

    if blocks:
        inputs = list(iter_inputs(files))
        name = inputs[-1][0] if inputs else name
        try:
            data = reader.read_blocks(buffer for _, buffer in inputs)
        except DecodeError as e:
            fail(name, e, verbose)
    else:
        try:
            for name, buffer in iter_inputs(files):
                reader.feed(buffer)
            image = reader.finish()
        except DecodeError as e:
            fail(name, e, verbose)
        data = image.data

        if verbose:
            for label, value in image.metadata():
                console.print(f"[dim]{label + ':':10s}[/dim] {value}", highlight=False)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "wb") as f:
            write_result(f, image, data)
        console.print(f"[green]Decoded:[/green] {name} -> {output}", highlight=False)
        console.print(f"[dim]Output size: {len(data)} bytes[/dim]")
    else:
        stdout = typer.get_binary_stream("stdout")
        write_result(stdout, image, data)
        stdout.flush()
