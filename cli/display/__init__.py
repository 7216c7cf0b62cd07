"""
CLI display modules.
"""

from cli.display.tables import display_frames, display_image_info
from cli.display.hex_view import display_hex_dump
from cli.display.logs import err_console, setup_logging

__all__ = [
    "display_frames",
    "display_image_info",
    "display_hex_dump",
    "err_console",
    "setup_logging",
]
