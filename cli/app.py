"""
a6pkg - Alesis Andromeda A6 software update packager/unpackager.

A CLI tool for decoding and inspecting A6 SysEx update captures.
"""

import typer
from rich.console import Console

from a6tools import __version__
from cli.commands.capture import capture, ports
from cli.commands.decode import decode
from cli.commands.frames import frames
from cli.commands.info import info

console = Console()

# Main app
app = typer.Typer(
    name="a6pkg",
    help="Decode and inspect Alesis Andromeda A6 SysEx software updates.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Add commands directly
app.command(name="decode")(decode)
app.command(name="info")(info)
app.command(name="frames")(frames)
app.command(name="capture")(capture)
app.command(name="ports")(ports)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]a6pkg[/bold] version {__version__}")
    console.print("[dim]A6 software update packager/unpackager[/dim]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
) -> None:
    """
    a6pkg - Convert Alesis Andromeda A6 SysEx updates to binary images.

    [bold]Quick Start:[/bold]

        a6pkg decode update.syx -o os.bin    # SysEx to binary image
        a6pkg info update.syx                # Image version and checksum

    [bold]Analysis Commands:[/bold]

        a6pkg frames update.syx              # List SysEx frames
        a6pkg decode update.syx --blocks     # SysEx to raw blocks

    [bold]MIDI Commands:[/bold]

        a6pkg ports                          # List MIDI inputs
        a6pkg capture -o update.syx          # Record an update from MIDI

    Use --help with any command for more details.
    """
    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
