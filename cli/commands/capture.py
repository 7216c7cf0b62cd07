"""
Capture command - record an A6 update from a MIDI input port.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import mido
import typer
from rich.console import Console

from a6tools.midi.capture import capture_sysex
from cli.display.logs import setup_logging

console = Console()


def capture(
    port: Optional[str] = typer.Option(
        None, "--port", "-p", envvar="A6PKG_MIDI_PORT", help="MIDI input port (default: first)"
    ),
    timeout: float = typer.Option(60.0, "--timeout", "-t", help="Max total wait in seconds"),
    idle_timeout: float = typer.Option(
        5.0, "--idle-timeout", help="Stop after N seconds without messages"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output .syx file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show each message"),
) -> None:
    """
    Capture SysEx from a MIDI input and save it as a .syx file.

    Start the capture, then send the update from the A6 or from the
    sending computer.

    Examples:

        a6pkg capture -o update.syx

        a6pkg capture --port "USB Midi" --idle-timeout 10
    """
    setup_logging(verbose)

    def show(msg: mido.Message) -> None:
        if verbose:
            preview = " ".join(f"{b:02X}" for b in msg.data[:8])
            console.print(f"  [dim]SysEx:[/dim] {preview}... ({len(msg.data) + 2} bytes)")

    console.print("[bold]Waiting for SysEx...[/bold]")
    try:
        result = capture_sysex(port, timeout=timeout, idle_timeout=idle_timeout, on_message=show)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not result.message_count:
        console.print("[yellow]No SysEx messages received.[/yellow]")
        raise typer.Exit(1)

    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = Path(f"a6_capture_{timestamp}.syx")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.data)

    console.print(f"[green]Captured:[/green] {result.port} -> {output}", highlight=False)
    console.print(
        f"[dim]{result.message_count} messages, {result.update_frames} update frames, "
        f"{len(result.data)} bytes[/dim]"
    )


def ports() -> None:
    """List available MIDI input ports."""
    names = mido.get_input_names()
    if not names:
        console.print("[yellow]No MIDI input ports found.[/yellow]")
        raise typer.Exit(1)

    for i, name in enumerate(names):
        console.print(f"  [dim][{i}][/dim] {name}", highlight=False)
