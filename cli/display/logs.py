"""
Logging setup for CLI commands.

Decoder diagnostics (skipped noise, duplicate blocks) arrive through the
standard logging module and are rendered on stderr with Rich, keeping
stdout free for binary output.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Route log records to a Rich handler on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, markup=False)],
        force=True,
    )
